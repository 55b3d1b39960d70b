"""Tests for the round state machine."""

import asyncio

import pytest

from wine_options.services.matching import CandidateMatcher
from wine_options.services.round import (
    CandidateMatched,
    GuessesInProgress,
    HintsExtracted,
    QuestionsBuilt,
    RoundService,
    RoundStateError,
    Scored,
)
from wine_options.services.scoring import QuizAttribute

from conftest import FakeCatalog


LABEL = "CHÂTEAU EXAMPLE 2015 BORDEAUX FRANCE MERLOT"


def start(service, text=LABEL):
    return asyncio.run(service.start(text))


class TestTransitions:
    """Test the happy path through each state."""

    def test_extract(self, round_service):
        state = round_service.extract(LABEL)
        assert isinstance(state, HintsExtracted)
        assert state.hints.vintage_year == 2015

    def test_match(self, round_service):
        state = asyncio.run(round_service.match(round_service.extract(LABEL)))
        assert isinstance(state, CandidateMatched)
        assert state.record.id == "w1"
        assert state.match_error is None

    def test_build(self, round_service):
        built = start(round_service)
        assert isinstance(built, QuestionsBuilt)
        assert len(built.questions) == 6
        assert built.truth.max_score == 6

    def test_full_round_perfect_score(self, round_service):
        state = start(round_service)
        for question in state.questions:
            state = round_service.answer(state, question.attribute, question.correct_value)
        assert isinstance(state, GuessesInProgress)

        scored = round_service.score(state)
        assert isinstance(scored, Scored)
        assert scored.result.score == 6
        assert scored.result.max == 6

    def test_answers_accumulate(self, round_service):
        built = start(round_service)
        first = round_service.answer(built, QuizAttribute.WORLD, "Old World")
        second = round_service.answer(first, QuizAttribute.COUNTRY, "France")
        assert first.guess.country is None
        assert second.guess.world == "Old World"
        assert second.guess.country == "France"

    def test_score_without_answers(self, round_service):
        scored = round_service.score(start(round_service))
        assert scored.result.score == 0
        assert scored.result.max == 6


class TestDegradedRounds:
    """Test rounds that continue without a catalog match."""

    def test_catalog_down_still_playable(self, builder):
        service = RoundService(matcher=CandidateMatcher(FakeCatalog(fail=True)), builder=builder)
        built = start(service)
        assert built.record is None
        assert built.match_error
        assert len(built.questions) >= 4
        assert all(q.options for q in built.questions)

    def test_no_match(self, round_service):
        built = start(round_service, "Domaine Inconnu Grand Vin Rouge")
        assert built.record is None
        assert built.match_error is None
        assert len(built.questions) == 4
        assert built.truth.max_score == 5

    def test_empty_text(self, round_service):
        built = start(round_service, "")
        assert built.record is None
        assert len(built.questions) == 4


class TestIllegalTransitions:
    """Test out-of-order transitions are rejected."""

    def test_cannot_score_before_build(self, round_service):
        with pytest.raises(RoundStateError):
            round_service.score(round_service.extract(LABEL))

    def test_cannot_build_before_match(self, round_service):
        with pytest.raises(RoundStateError):
            asyncio.run(round_service.build(round_service.extract(LABEL)))

    def test_cannot_answer_after_scoring(self, round_service):
        scored = round_service.score(start(round_service))
        with pytest.raises(RoundStateError):
            round_service.answer(scored, QuizAttribute.WORLD, "Old World")

    def test_cannot_rescore(self, round_service):
        scored = round_service.score(start(round_service))
        with pytest.raises(RoundStateError):
            round_service.score(scored)

    def test_cannot_answer_unasked_attribute(self, round_service):
        built = start(round_service, "Domaine Inconnu Grand Vin Rouge")
        with pytest.raises(ValueError):
            round_service.answer(built, QuizAttribute.SUBREGION, "Pauillac")
