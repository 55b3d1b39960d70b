"""API route definitions."""

import time
from typing import Optional
import logging

from fastapi import APIRouter, HTTPException

from ..models import (
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
from ..services import (
    CatalogClient,
    CandidateMatcher,
    OptionBuilder,
    RoundService,
    LabelOCRService,
    OCRServiceError,
    PointsClient,
    PointsAwardError,
    CatalogError,
    GameSession,
    GameSessionService,
    LabelHints,
    QuestionsBuilt,
    GroundTruth,
    Guess,
    extract_hints,
    score,
)
from .. import __version__

logger = logging.getLogger(__name__)
router = APIRouter()

# Initialize services
catalog = CatalogClient()
round_service = RoundService(
    matcher=CandidateMatcher(catalog),
    builder=OptionBuilder(catalog),
)
ocr_service = LabelOCRService()
points_client = PointsClient()
game_sessions = GameSessionService(catalog)


def _hints_out(hints: LabelHints) -> LabelHintsOut:
    return LabelHintsOut(
        vintage_year=hints.vintage_year,
        is_non_vintage=hints.is_non_vintage,
        inferred_variety=hints.inferred_variety,
        inferred_varieties=list(hints.inferred_varieties),
        confidence=HintConfidenceOut(
            variety=hints.confidence.variety,
            vintage=hints.confidence.vintage,
        ),
        is_sparkling=hints.is_sparkling,
        style_words=list(hints.style_words),
        signals=list(hints.signals),
    )


def _round_response(built: QuestionsBuilt, session: Optional[GameSession] = None) -> RoundResponse:
    record = built.record
    wine = None
    if record is not None:
        wine = WineOut(
            id=record.id,
            display_name=record.display_name,
            country=record.country,
            region=record.region,
            appellation=record.appellation,
            variety=record.variety,
            vintage=record.vintage,
            world=record.world,
        )

    questions = [
        QuestionOut(
            attribute=q.attribute.value,
            prompt=q.prompt,
            options=list(q.options),
            correct_index=q.correct_index,
        )
        for q in built.questions
    ]
    truth = built.truth
    return RoundResponse(
        matched=record is not None,
        ocr_text=built.text,
        hints=_hints_out(built.hints),
        wine=wine,
        questions=questions,
        truth=AttributeAnswers(
            world=truth.world,
            variety=truth.variety,
            vintage=truth.vintage,
            country=truth.country,
            region=truth.region,
            subregion=truth.subregion,
        ),
        max_score=truth.max_score,
        match_confidence=round(built.match.confidence, 3) if record is not None else None,
        match_error=built.match_error,
        game_id=session.game_id if session else None,
        share_url=session.share_url if session else None,
    )


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health and OCR readiness."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        ocr_ready=ocr_service.is_ready,
    )


@router.post("/hints", response_model=LabelHintsOut, tags=["Rounds"])
async def label_hints(request: HintsRequest):
    """Extract vintage / variety hints from label text. Never fails."""
    return _hints_out(extract_hints(request.text))


@router.post("/rounds", response_model=RoundResponse, tags=["Rounds"])
async def start_round(request: RoundRequest):
    """
    Start a round from pasted label text.

    Matches the label against the catalog and builds the question set.
    A failed or empty match still returns playable questions.
    """
    start_time = time.time()
    built = await round_service.start(request.text)
    total_ms = int((time.time() - start_time) * 1000)
    logger.info(f"Round built: matched={built.record is not None}, questions={len(built.questions)} ({total_ms}ms)")
    return _round_response(built)


@router.post(
    "/ocr-label",
    response_model=RoundResponse,
    responses={
        502: {"model": ErrorResponse, "description": "Storage or OCR failure"},
    },
    tags=["Rounds"],
)
async def ocr_label(request: OCRLabelRequest):
    """
    OCR a stored label photo and start a round from its text.

    A matched wine also gets a shareable game (gameId + shareUrl) owned by
    userId. Storage and vision failures return 502 so the client can retry
    or fall back to pasting the text; a failed game insert only drops the
    share link.
    """
    start_time = time.time()
    try:
        text = await ocr_service.read_label(request.storage_path)
    except OCRServiceError as e:
        logger.error(f"OCR failed for '{request.storage_path}': {e}")
        raise HTTPException(status_code=502, detail=str(e))
    ocr_ms = int((time.time() - start_time) * 1000)

    built = await round_service.start(text)

    session: Optional[GameSession] = None
    if built.record is not None:
        try:
            session = await game_sessions.create(built.record.id, request.user_id)
        except CatalogError as e:
            logger.warning(f"Could not create shareable game for {built.record.id}: {e}")

    total_ms = int((time.time() - start_time) * 1000)
    logger.info(f"Timing breakdown: ocr={ocr_ms}ms, total={total_ms}ms")
    return _round_response(built, session)


@router.post("/score", response_model=ScoreResponse, tags=["Scoring"])
async def score_round(request: ScoreRequest):
    """
    Score a player's guesses; award points when a user is given.

    Points failures never lose the score: it is returned with a warning.
    """
    guess = Guess(**request.guess.model_dump())
    truth = GroundTruth(**request.truth.model_dump())
    result = score(guess, truth)

    award: Optional[AwardOut] = None
    warning: Optional[str] = None
    if request.user_id:
        try:
            awarded = await points_client.award(
                user_id=request.user_id,
                score=result.score,
                max_score=result.max,
                mode=request.mode,
            )
            award = AwardOut(
                ok=awarded.ok,
                points_awarded=awarded.points_awarded,
                total_points=awarded.total_points,
            )
            warning = awarded.warning
        except PointsAwardError as e:
            logger.warning(f"Points award failed for {request.user_id}: {e}")
            warning = "Points service unavailable"

    return ScoreResponse(
        score=result.score,
        max=result.max,
        correct=[a.value for a in result.correct],
        award=award,
        warning=warning,
    )
