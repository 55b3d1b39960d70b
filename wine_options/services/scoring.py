"""Ground truth derivation and guess scoring.

One point per attribute where the guess equals the truth after trimming and
case-folding. No fuzzy matching: options are presented in canonical form, so
exact comparison is fair. Sub-region only counts when the wine has one, which
makes the maximum either 5 or 6.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Optional, Tuple
import logging

from .catalog import WineRecord
from .geography import world_from_country, world_label
from .hints import LabelHints

logger = logging.getLogger(__name__)


NV_OPTION = "NV"
BASE_MAX_SCORE = 5


class QuizAttribute(str, Enum):
    """Attributes a player guesses."""
    WORLD = "world"
    VARIETY = "variety"
    VINTAGE = "vintage"
    COUNTRY = "country"
    REGION = "region"
    SUBREGION = "subregion"

    @property
    def label(self) -> str:
        return ATTRIBUTE_LABELS[self]


ATTRIBUTE_LABELS = {
    QuizAttribute.WORLD: "World",
    QuizAttribute.VARIETY: "Variety",
    QuizAttribute.VINTAGE: "Vintage",
    QuizAttribute.COUNTRY: "Country",
    QuizAttribute.REGION: "Region",
    QuizAttribute.SUBREGION: "Sub-region",
}


@dataclass(frozen=True)
class _AttributeValues:
    world: Optional[str] = None
    variety: Optional[str] = None
    vintage: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    subregion: Optional[str] = None

    def get(self, attribute: QuizAttribute) -> Optional[str]:
        return getattr(self, QuizAttribute(attribute).value)


@dataclass(frozen=True)
class GroundTruth(_AttributeValues):
    """Correct answer per attribute; None means nothing to score against."""

    @property
    def has_subregion(self) -> bool:
        return bool(self.subregion)

    @property
    def max_score(self) -> int:
        return BASE_MAX_SCORE + (1 if self.has_subregion else 0)


@dataclass(frozen=True)
class Guess(_AttributeValues):
    """A player's picks. Immutable: answering returns a new Guess."""

    def with_answer(self, attribute: QuizAttribute, value: Optional[str]) -> "Guess":
        return replace(self, **{QuizAttribute(attribute).value: value})

    @property
    def answered(self) -> Tuple[QuizAttribute, ...]:
        return tuple(
            QuizAttribute(f.name) for f in fields(self) if getattr(self, f.name)
        )


@dataclass(frozen=True)
class ScoreResult:
    """Final score for a round."""
    score: int
    max: int
    correct: Tuple[QuizAttribute, ...] = ()


def format_vintage(year: Optional[int]) -> str:
    """Vintage as an option string: "2015" or "NV"."""
    return str(year) if year is not None else NV_OPTION


def ground_truth(record: Optional[WineRecord], hints: LabelHints) -> GroundTruth:
    """
    Derive the answer key for a round.

    The matched record wins. Without one, label hints stand in as weak truth
    for Variety and Vintage; World, Country and Region have no truth.
    """
    if record is None:
        if hints.is_non_vintage:
            vintage = NV_OPTION
        elif hints.vintage_year is not None:
            vintage = format_vintage(hints.vintage_year)
        else:
            vintage = None
        return GroundTruth(variety=hints.inferred_variety, vintage=vintage)

    if record.vintage is not None:
        vintage = format_vintage(record.vintage)
    elif hints.vintage_year is not None and not hints.is_non_vintage:
        vintage = format_vintage(hints.vintage_year)
    else:
        vintage = NV_OPTION

    # Without a region the appellation answers both Region and Sub-region,
    # so one correct pick scores twice. Kept on purpose.
    has_context = bool(record.region or record.country)
    return GroundTruth(
        world=world_label(record.world or world_from_country(record.country)),
        variety=record.variety or hints.inferred_variety,
        vintage=vintage,
        country=record.country,
        region=record.region or record.appellation,
        subregion=record.appellation if has_context else None,
    )


def answers_match(guess: Optional[str], truth: Optional[str]) -> bool:
    """Trimmed, case-insensitive equality. Missing on either side never matches."""
    if not guess or not truth:
        return False
    return guess.strip().casefold() == truth.strip().casefold()


def score(guess: Guess, truth: GroundTruth) -> ScoreResult:
    """
    Score a guess against the truth.

    Args:
        guess: Player picks (unset attributes count as wrong)
        truth: Answer key

    Returns:
        ScoreResult with score, max (5 or 6) and the attributes guessed right
    """
    attributes = [
        QuizAttribute.WORLD,
        QuizAttribute.VARIETY,
        QuizAttribute.VINTAGE,
        QuizAttribute.COUNTRY,
        QuizAttribute.REGION,
    ]
    if truth.has_subregion:
        attributes.append(QuizAttribute.SUBREGION)

    correct = tuple(a for a in attributes if answers_match(guess.get(a), truth.get(a)))
    result = ScoreResult(score=len(correct), max=truth.max_score, correct=correct)
    logger.debug(f"Scored {result.score}/{result.max}")
    return result
