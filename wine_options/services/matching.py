"""Best-effort candidate matching of label text against the catalog.

Recall over precision: the first few words of the label are OR-matched
against wine names, then narrowed by the inferred variety and vintage.
If narrowing leaves nothing, the token-only search is used instead.
No match is a normal outcome; only catalog failures raise.
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import List, Optional
import logging

from rapidfuzz import fuzz

from ..config import get_settings
from .catalog import CatalogClient, CatalogError, WineRecord
from .hints import LabelHints

logger = logging.getLogger(__name__)

# Runs of 3+ letters, any script (accented words survive)
TOKEN_PATTERN = re.compile(r"[^\W\d_]{3,}")


class CandidateMatchError(Exception):
    """Catalog lookup failed or timed out while matching a label."""


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a candidate search. record is None when nothing matched."""
    record: Optional[WineRecord]
    confidence: float = 0.0
    tokens: List[str] = field(default_factory=list)
    narrowed: bool = False

    @property
    def matched(self) -> bool:
        return self.record is not None


def extract_search_tokens(text: str, max_tokens: int) -> List[str]:
    """Distinct alphabetic tokens in order of appearance, capped at max_tokens."""
    tokens: List[str] = []
    seen = set()
    for match in TOKEN_PATTERN.finditer(text or ""):
        tok = match.group(0)
        key = tok.lower()
        if key in seen:
            continue
        seen.add(key)
        tokens.append(tok)
        if len(tokens) >= max_tokens:
            break
    return tokens


def name_similarity(display_name: str, text: str) -> float:
    """Token-set similarity between a wine name and label text (0-1)."""
    if not display_name or not text:
        return 0.0
    return fuzz.token_set_ratio(display_name.lower(), text.lower()) / 100.0


class CandidateMatcher:
    """Finds a single best-effort catalog wine for a label."""

    def __init__(self, catalog: Optional[CatalogClient] = None):
        self.settings = get_settings()
        self.catalog = catalog or CatalogClient()

    async def _search(self, tokens: List[str], **filters) -> list:
        return await asyncio.wait_for(
            self.catalog.search_wines(tokens, **filters),
            timeout=self.settings.catalog_timeout_seconds,
        )

    async def match_candidate(self, text: str, hints: LabelHints) -> MatchResult:
        """
        Match label text against the catalog.

        Args:
            text: Raw OCR text
            hints: Hints extracted from the same text

        Returns:
            MatchResult (record is None when nothing matched)

        Raises:
            CandidateMatchError: catalog error or timeout
        """
        tokens = extract_search_tokens(text, self.settings.match_max_tokens)
        if not tokens:
            logger.info("No searchable tokens in label text; skipping catalog search")
            return MatchResult(record=None, tokens=[])

        primary = tokens[:self.settings.match_primary_tokens]
        filters = {}
        if hints.inferred_variety:
            filters["variety"] = hints.inferred_variety
        if hints.is_non_vintage:
            filters["non_vintage"] = True
        elif hints.vintage_year is not None:
            filters["vintage"] = hints.vintage_year

        try:
            rows = await self._search(primary, **filters) if filters else []
            narrowed = bool(rows)
            if not rows:
                if filters:
                    logger.info(f"Narrowed search empty for {primary}; retrying with tokens only")
                rows = await self._search(primary)
        except asyncio.TimeoutError as e:
            raise CandidateMatchError("Catalog search timed out") from e
        except CatalogError as e:
            raise CandidateMatchError(str(e)) from e

        if not rows:
            logger.info(f"No catalog match for tokens {primary}")
            return MatchResult(record=None, tokens=tokens)

        record = WineRecord.from_row(rows[0])
        confidence = name_similarity(record.display_name, text)
        logger.info(
            f"Matched '{record.display_name}' (id={record.id}, "
            f"similarity={confidence:.2f}, narrowed={narrowed})"
        )
        return MatchResult(record=record, confidence=confidence, tokens=tokens, narrowed=narrowed)
