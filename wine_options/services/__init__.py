"""Services for label hints, catalog matching, question building, scoring and collaborators."""

from .hints import LabelHints, HintConfidence, extract_hints
from .catalog import CatalogClient, CatalogError, WineRecord
from .geography import world_from_country, world_label
from .matching import CandidateMatcher, CandidateMatchError, MatchResult
from .options import OptionBuilder, Question
from .scoring import GroundTruth, Guess, QuizAttribute, ScoreResult, ground_truth, score
from .ocr import LabelOCRService, OCRServiceError
from .points import PointsClient, PointsAwardError, AwardResult
from .sessions import GameSession, GameSessionService
from .round import (
    RoundService,
    RoundStateError,
    HintsExtracted,
    CandidateMatched,
    QuestionsBuilt,
    GuessesInProgress,
    Scored,
)

__all__ = [
    "LabelHints",
    "HintConfidence",
    "extract_hints",
    "CatalogClient",
    "CatalogError",
    "WineRecord",
    "world_from_country",
    "world_label",
    "CandidateMatcher",
    "CandidateMatchError",
    "MatchResult",
    "OptionBuilder",
    "Question",
    "GroundTruth",
    "Guess",
    "QuizAttribute",
    "ScoreResult",
    "ground_truth",
    "score",
    "LabelOCRService",
    "OCRServiceError",
    "PointsClient",
    "PointsAwardError",
    "AwardResult",
    "GameSession",
    "GameSessionService",
    "RoundService",
    "RoundStateError",
    "HintsExtracted",
    "CandidateMatched",
    "QuestionsBuilt",
    "GuessesInProgress",
    "Scored",
]
