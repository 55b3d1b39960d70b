"""Pydantic models for request/response schemas."""

from .schemas import (
    HintConfidenceOut,
    LabelHintsOut,
    WineOut,
    QuestionOut,
    AttributeAnswers,
    HintsRequest,
    RoundRequest,
    OCRLabelRequest,
    RoundResponse,
    ScoreRequest,
    AwardOut,
    ScoreResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "HintConfidenceOut",
    "LabelHintsOut",
    "WineOut",
    "QuestionOut",
    "AttributeAnswers",
    "HintsRequest",
    "RoundRequest",
    "OCRLabelRequest",
    "RoundResponse",
    "ScoreRequest",
    "AwardOut",
    "ScoreResponse",
    "ErrorResponse",
    "HealthResponse",
]
