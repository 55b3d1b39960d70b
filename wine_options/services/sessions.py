"""Shareable games for matched label photos.

A game ties a matched catalog wine to its creator; a share token lets a
friend open the same quiz from a link.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from ..config import get_settings
from .catalog import CatalogClient, CatalogError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameSession:
    """A stored game and its public share link."""
    game_id: str
    share_token: str
    share_url: str


class GameSessionService:
    """Creates game rows and share tokens in the catalog backend."""

    def __init__(self, catalog: Optional[CatalogClient] = None):
        self.settings = get_settings()
        self.catalog = catalog or CatalogClient()

    def share_url(self, token: str) -> str:
        return f"{self.settings.share_base_url.rstrip('/')}/wine-options/play/{token}"

    async def create(self, wine_id: str, user_id: Optional[str] = None) -> GameSession:
        """
        Create a game for a matched wine plus a share token for it.

        Args:
            wine_id: Matched catalog wine
            user_id: Creator, or None for anonymous players

        Raises:
            CatalogError: either insert failed
        """
        game = await self.catalog.insert_row(
            self.settings.games_table,
            {"wine_id": wine_id, "created_by": user_id},
        )
        game_id = game.get("id")
        if not game_id:
            raise CatalogError("Game insert returned no id")

        token_row = await self.catalog.insert_row(
            self.settings.share_tokens_table,
            {"game_id": game_id, "created_by": user_id},
        )
        token = token_row.get("token")
        if not token:
            raise CatalogError("Share token insert returned no token")

        session = GameSession(game_id=str(game_id), share_token=str(token), share_url=self.share_url(str(token)))
        logger.info(f"Created game {session.game_id} for wine {wine_id}")
        return session
