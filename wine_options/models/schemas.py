"""Pydantic schemas for API requests and responses.

Wire JSON uses camelCase keys; snake_case input is accepted as well.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HintConfidenceOut(CamelModel):
    variety: float = Field(0.0, ge=0.0, le=1.0)
    vintage: float = Field(0.0, ge=0.0, le=1.0)


class LabelHintsOut(CamelModel):
    """Hints inferred from label text."""
    vintage_year: Optional[int] = None
    is_non_vintage: bool = False
    inferred_variety: Optional[str] = None
    inferred_varieties: list[str] = []
    confidence: HintConfidenceOut = HintConfidenceOut()
    is_sparkling: bool = False
    style_words: list[str] = []
    signals: list[str] = []


class WineOut(CamelModel):
    """Matched catalog wine."""
    id: str
    display_name: str
    country: Optional[str] = None
    region: Optional[str] = None
    appellation: Optional[str] = None
    variety: Optional[str] = None
    vintage: Optional[int] = None
    world: Optional[Literal["old", "new"]] = None


class QuestionOut(CamelModel):
    """One multiple-choice question."""
    attribute: str
    prompt: str
    options: list[str] = Field(..., min_length=1)
    correct_index: Optional[int] = None


class AttributeAnswers(CamelModel):
    """One value per quiz attribute."""
    world: Optional[str] = None
    variety: Optional[str] = None
    vintage: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    subregion: Optional[str] = None


class HintsRequest(CamelModel):
    text: str = Field("", description="Raw OCR text from a wine label")


class RoundRequest(CamelModel):
    text: str = Field(..., description="Raw OCR text from a wine label")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {"text": "CHÂTEAU EXAMPLE 2015 BORDEAUX FRANCE MERLOT"}
        },
    )


class OCRLabelRequest(CamelModel):
    storage_path: str = Field(..., min_length=1, description="Path of the label image in storage")
    user_id: Optional[str] = None


class RoundResponse(CamelModel):
    """A playable round: hints, optional match and questions."""
    matched: bool
    ocr_text: str
    hints: LabelHintsOut
    wine: Optional[WineOut] = None
    questions: list[QuestionOut]
    truth: AttributeAnswers
    max_score: int
    match_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    match_error: Optional[str] = None
    game_id: Optional[str] = None
    share_url: Optional[str] = None


class ScoreRequest(CamelModel):
    guess: AttributeAnswers
    truth: AttributeAnswers
    user_id: Optional[str] = None
    mode: Literal["solo", "host", "guest"] = "solo"

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "guess": {"world": "Old World", "variety": "Merlot", "vintage": "2015"},
                "truth": {
                    "world": "Old World", "variety": "Merlot", "vintage": "2015",
                    "country": "France", "region": "Bordeaux",
                },
                "mode": "solo",
            }
        },
    )


class AwardOut(CamelModel):
    ok: bool
    points_awarded: Optional[int] = None
    total_points: Optional[int] = None


class ScoreResponse(CamelModel):
    score: int
    max: int
    correct: list[str] = []
    award: Optional[AwardOut] = None
    warning: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    version: str
    ocr_ready: bool
