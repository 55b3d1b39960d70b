"""Round lifecycle as explicit states.

    HintsExtracted -> CandidateMatched -> QuestionsBuilt -> GuessesInProgress -> Scored

Each state is an immutable value; transitions return a new state and reject
anything out of order (e.g. scoring before questions exist).
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union
import logging

from .catalog import WineRecord
from .hints import LabelHints, extract_hints
from .matching import CandidateMatcher, CandidateMatchError, MatchResult
from .options import OptionBuilder, Question
from .scoring import GroundTruth, Guess, QuizAttribute, ScoreResult, ground_truth, score

logger = logging.getLogger(__name__)


class RoundStateError(Exception):
    """Transition attempted from the wrong round state."""


@dataclass(frozen=True)
class HintsExtracted:
    text: str
    hints: LabelHints


@dataclass(frozen=True)
class CandidateMatched:
    text: str
    hints: LabelHints
    match: MatchResult
    match_error: Optional[str] = None

    @property
    def record(self) -> Optional[WineRecord]:
        return self.match.record


@dataclass(frozen=True)
class QuestionsBuilt:
    text: str
    hints: LabelHints
    match: MatchResult
    questions: Tuple[Question, ...]
    truth: GroundTruth
    match_error: Optional[str] = None

    @property
    def record(self) -> Optional[WineRecord]:
        return self.match.record


@dataclass(frozen=True)
class GuessesInProgress:
    built: QuestionsBuilt
    guess: Guess = field(default_factory=Guess)


@dataclass(frozen=True)
class Scored:
    built: QuestionsBuilt
    guess: Guess
    result: ScoreResult


RoundState = Union[HintsExtracted, CandidateMatched, QuestionsBuilt, GuessesInProgress, Scored]


def _require(state: RoundState, *expected: type) -> None:
    if not isinstance(state, expected):
        names = " or ".join(t.__name__ for t in expected)
        raise RoundStateError(f"Expected {names}, got {type(state).__name__}")


class RoundService:
    """Drives a single round from label text to score."""

    def __init__(
        self,
        matcher: Optional[CandidateMatcher] = None,
        builder: Optional[OptionBuilder] = None,
    ):
        self.matcher = matcher or CandidateMatcher()
        self.builder = builder or OptionBuilder()

    def extract(self, text: str) -> HintsExtracted:
        return HintsExtracted(text=text or "", hints=extract_hints(text or ""))

    async def match(self, state: HintsExtracted) -> CandidateMatched:
        """Match against the catalog; a failed lookup degrades to no candidate."""
        _require(state, HintsExtracted)
        try:
            result = await self.matcher.match_candidate(state.text, state.hints)
            error = None
        except CandidateMatchError as e:
            logger.warning(f"Candidate match failed, continuing without a wine: {e}")
            result = MatchResult(record=None)
            error = str(e)
        return CandidateMatched(text=state.text, hints=state.hints, match=result, match_error=error)

    async def build(self, state: CandidateMatched) -> QuestionsBuilt:
        _require(state, CandidateMatched)
        questions = await self.builder.build_questions(state.record, state.hints)
        return QuestionsBuilt(
            text=state.text,
            hints=state.hints,
            match=state.match,
            questions=tuple(questions),
            truth=ground_truth(state.record, state.hints),
            match_error=state.match_error,
        )

    async def start(self, text: str) -> QuestionsBuilt:
        """Extract, match and build in one go."""
        matched = await self.match(self.extract(text))
        return await self.build(matched)

    def answer(
        self,
        state: Union[QuestionsBuilt, GuessesInProgress],
        attribute: QuizAttribute,
        value: Optional[str],
    ) -> GuessesInProgress:
        """Record one pick. Only attributes that were asked can be answered."""
        _require(state, QuestionsBuilt, GuessesInProgress)
        if isinstance(state, QuestionsBuilt):
            state = GuessesInProgress(built=state)

        attribute = QuizAttribute(attribute)
        asked = {q.attribute for q in state.built.questions}
        if attribute not in asked:
            raise ValueError(f"{attribute.label} was not asked this round")
        return GuessesInProgress(built=state.built, guess=state.guess.with_answer(attribute, value))

    def score(self, state: Union[QuestionsBuilt, GuessesInProgress]) -> Scored:
        """Freeze the guess and score it. Unanswered questions count as wrong."""
        _require(state, QuestionsBuilt, GuessesInProgress)
        if isinstance(state, QuestionsBuilt):
            state = GuessesInProgress(built=state)
        result = score(state.guess, state.built.truth)
        return Scored(built=state.built, guess=state.guess, result=result)
