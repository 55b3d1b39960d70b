"""Multiple-choice question construction.

For each attribute the correct value is combined with distractors from a
scoped catalog lookup, falling back to a fixed seed list when the lookup
fails, times out or comes back empty. Catalog lookups run concurrently.

Question set (in order): World, Variety, Vintage*, Country, Region, Sub-region*
  * Vintage only when there is a matched wine or a vintage/sparkling signal
  * Sub-region only when the matched wine has an appellation
"""

import asyncio
import random
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List, Optional, Tuple
import logging

from ..config import get_settings
from .catalog import CatalogClient, CatalogError, WineRecord
from .choices import ensure_options, index_of_choice, unique_choices
from .geography import WORLD_OPTIONS
from .hints import LabelHints, canonical_variety
from .scoring import NV_OPTION, GroundTruth, QuizAttribute, ground_truth

logger = logging.getLogger(__name__)


NOT_STATED = "Not stated"

COMMON_GRAPES = [
    "Chardonnay", "Pinot Noir", "Sauvignon Blanc", "Riesling", "Cabernet Sauvignon",
    "Merlot", "Syrah", "Cabernet Franc", "Grenache", "Tempranillo", "Nebbiolo", "Sangiovese",
    "Chenin Blanc", "Pinot Gris", "Viognier", "Malbec", "Zinfandel", "Gamay",
]
FALLBACK_COUNTRIES = ["France", "Italy", "USA", "Spain", "Australia"]
FALLBACK_REGIONS = ["Bordeaux", "Burgundy", "Napa Valley", "Barossa Valley", "Tuscany", "Rioja"]
FALLBACK_SUBREGIONS = ["Pauillac", "Margaux", "Saint-Émilion", "Chablis", "Meursault", "Barolo"]

PROMPTS = {
    QuizAttribute.WORLD: "Old World or New World?",
    QuizAttribute.VARIETY: "What grape variety is this?",
    QuizAttribute.VINTAGE: "Vintage or NV?",
    QuizAttribute.COUNTRY: "Which country is it from?",
    QuizAttribute.REGION: "Which region is it?",
    QuizAttribute.SUBREGION: "Which sub-region is it?",
}


@dataclass(frozen=True)
class Question:
    """One multiple-choice question. correct_index is None when unscored."""
    attribute: QuizAttribute
    prompt: str
    options: Tuple[str, ...]
    correct_index: Optional[int] = None

    @property
    def correct_value(self) -> Optional[str]:
        if self.correct_index is None:
            return None
        return self.options[self.correct_index]


def vintage_pool(
    is_non_vintage: bool,
    target_year: Optional[int],
    current_year: int,
    count: int = 4,
) -> List[str]:
    """
    Candidate vintage options before sampling.

    - NV label: NV plus the three most recent years
    - Known year: the year, neighbours within two years (not in the future), NV;
      older years top the pool up to `count` when future neighbours were dropped
    - Nothing known: NV plus the four most recent years
    """
    now = current_year
    if is_non_vintage:
        years = [now, now - 1, now - 2]
        return [NV_OPTION] + [str(y) for y in years]
    if target_year is not None:
        around = [target_year - 1, target_year + 1, target_year - 2, target_year + 2]
        years = [target_year] + [y for y in around if y <= now]
        step = 3
        while len(years) + 1 < count:
            older = target_year - step
            if older <= now:
                years.append(older)
            step += 1
        return unique_choices([str(y) for y in years] + [NV_OPTION])
    years = [now, now - 1, now - 2, now - 3]
    return [NV_OPTION] + [str(y) for y in years]


def should_ask_vintage(record: Optional[WineRecord], hints: LabelHints) -> bool:
    return record is not None or hints.has_vintage_signal or hints.is_sparkling


class OptionBuilder:
    """Builds the question set for a round."""

    def __init__(
        self,
        catalog: Optional[CatalogClient] = None,
        rng: Optional[random.Random] = None,
        current_year: Optional[int] = None,
    ):
        self.settings = get_settings()
        self.catalog = catalog or CatalogClient()
        self.rng = rng or random.Random(self.settings.random_seed)
        self.current_year = current_year

    # =========================================================================
    # CATALOG LOOKUPS
    # =========================================================================

    async def _lookup(self, name: str, call: Callable[[], Awaitable[List[str]]]) -> List[str]:
        """Run one distractor lookup; any failure yields an empty pool."""
        try:
            return await asyncio.wait_for(call(), timeout=self.settings.catalog_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"{name} lookup timed out; using fallback list")
        except CatalogError as e:
            logger.warning(f"{name} lookup failed ({e}); using fallback list")
        return []

    async def _empty(self) -> List[str]:
        return []

    async def _fetch_pools(self, record: Optional[WineRecord]) -> Tuple[List[str], List[str], List[str]]:
        """Fetch country, region and sub-region pools concurrently."""
        country = record.country if record else None
        region = (record.region or record.appellation) if record else None

        countries = self._lookup("get_countries", self.catalog.get_countries)
        if country:
            regions = self._lookup("get_regions", lambda: self.catalog.get_regions(country))
        else:
            regions = self._empty()
        if record and record.appellation and country and region:
            subregions = self._lookup(
                "get_subregions", lambda: self.catalog.get_subregions(country, region)
            )
        else:
            subregions = self._empty()

        return tuple(await asyncio.gather(countries, regions, subregions))

    # =========================================================================
    # PER-ATTRIBUTE QUESTIONS
    # =========================================================================

    def _question(self, attribute: QuizAttribute, options: List[str], index: Optional[int]) -> Question:
        return Question(
            attribute=attribute,
            prompt=PROMPTS[attribute],
            options=tuple(options),
            correct_index=index,
        )

    def world_question(self, truth: GroundTruth) -> Question:
        options = list(WORLD_OPTIONS)
        index = options.index(truth.world) if truth.world in options else None
        return self._question(QuizAttribute.WORLD, options, index)

    def variety_question(self, truth: GroundTruth, hints: LabelHints) -> Question:
        # Fizz with no variety on the label: "Not stated" takes one distractor slot
        inject = hints.is_sparkling and not hints.inferred_variety
        count = self.settings.option_count - (1 if inject else 0)
        # No synonym of the answer ("Syrah" for a "Shiraz") among the distractors
        grape = canonical_variety(truth.variety)
        pool = [g for g in COMMON_GRAPES if not (grape and canonical_variety(g) == grape)]
        options, index = ensure_options(truth.variety, pool, pool, count, self.rng)
        if inject and index_of_choice(options, NOT_STATED) is None:
            options = options + [NOT_STATED]
            self.rng.shuffle(options)
            index = index_of_choice(options, truth.variety)
        return self._question(QuizAttribute.VARIETY, options, index)

    def vintage_question(self, record: Optional[WineRecord], truth: GroundTruth, hints: LabelHints) -> Question:
        current_year = self.current_year or date.today().year
        target = record.vintage if record and record.vintage is not None else hints.vintage_year
        pool = vintage_pool(hints.is_non_vintage, target, current_year, self.settings.option_count)
        options, index = ensure_options(truth.vintage, pool, pool, self.settings.option_count, self.rng)
        return self._question(QuizAttribute.VINTAGE, options, index)

    def pooled_question(
        self,
        attribute: QuizAttribute,
        correct: Optional[str],
        pool: List[str],
        fallback: List[str],
    ) -> Question:
        options, index = ensure_options(correct, pool, fallback, self.settings.option_count, self.rng)
        return self._question(attribute, options, index)

    # =========================================================================
    # QUESTION SET
    # =========================================================================

    async def build_questions(self, record: Optional[WineRecord], hints: LabelHints) -> List[Question]:
        """
        Build the question set for a matched wine (or label hints alone).

        Args:
            record: Matched catalog wine, or None
            hints: Label hints for the round

        Returns:
            4 to 6 questions; every question has a non-empty option list
        """
        truth = ground_truth(record, hints)
        countries, regions, subregions = await self._fetch_pools(record)

        questions = [
            self.world_question(truth),
            self.variety_question(truth, hints),
        ]
        if should_ask_vintage(record, hints):
            questions.append(self.vintage_question(record, truth, hints))
        questions.append(
            self.pooled_question(QuizAttribute.COUNTRY, truth.country, countries, FALLBACK_COUNTRIES)
        )
        questions.append(
            self.pooled_question(QuizAttribute.REGION, truth.region, regions, FALLBACK_REGIONS)
        )
        if truth.has_subregion:
            questions.append(
                self.pooled_question(QuizAttribute.SUBREGION, truth.subregion, subregions, FALLBACK_SUBREGIONS)
            )

        logger.info(
            f"Built {len(questions)} questions "
            f"({'matched' if record else 'unmatched'}, max score {truth.max_score})"
        )
        return questions
