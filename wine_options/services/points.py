"""Client for the external points-awarding function."""

from dataclasses import dataclass
from typing import Optional
import logging

import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)


GAME_MODES = ("solo", "host", "guest")


class PointsAwardError(Exception):
    """Points could not be awarded."""


@dataclass
class AwardResult:
    """Response from the points collaborator."""
    ok: bool
    points_awarded: Optional[int] = None
    total_points: Optional[int] = None
    warning: Optional[str] = None


class PointsClient:
    """Posts a finished round's score to the points ledger."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = get_settings()
        self._client = http_client

    async def award(
        self,
        user_id: str,
        score: int,
        max_score: int,
        mode: str = "solo",
    ) -> AwardResult:
        """
        Award points for a completed round.

        Called at most once per round; idempotency is the ledger's concern.

        Raises:
            ValueError: invalid arguments
            PointsAwardError: collaborator unreachable or rejected the request
        """
        if not user_id:
            raise ValueError("user_id is required")
        if mode not in GAME_MODES:
            raise ValueError(f"Invalid mode '{mode}'. Expected one of: {', '.join(GAME_MODES)}")

        payload = {
            "user_id": user_id,
            "mode": mode,
            "score": score,
            "max_score": max_score,
        }
        url = self.settings.points_award_url
        try:
            if self._client is not None:
                response = await self._client.post(url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.settings.points_timeout_seconds) as client:
                    response = await client.post(url, json=payload)
            data = response.json()
        except httpx.HTTPError as e:
            raise PointsAwardError(f"Points service unreachable: {e}") from e
        except ValueError as e:
            raise PointsAwardError("Points service returned invalid JSON") from e
        if not isinstance(data, dict):
            raise PointsAwardError("Points service returned an unexpected response")

        if response.status_code >= 400 or not data.get("ok"):
            error = data.get("error") or f"HTTP {response.status_code}"
            raise PointsAwardError(f"Points service rejected award: {error}")

        result = AwardResult(
            ok=True,
            points_awarded=data.get("points_awarded"),
            total_points=data.get("total_points"),
            warning=data.get("warn"),
        )
        logger.info(f"Awarded {result.points_awarded} point(s) to {user_id} ({mode}, {score}/{max_score})")
        return result
