"""Label hint extraction from raw OCR text.

Turns free-form label text into structured hints:
1. Vintage year (first plausible 4-digit year) or a non-vintage flag
2. Grape variety signal, including the Blanc de Blancs / Blanc de Noirs shorthands
3. Sparkling-wine cues and style words, recorded as signals only

Extraction is total and deterministic: any string (including "") yields a
LabelHints value, and the same text always yields an equal value.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple
import logging

from ..config import get_settings

logger = logging.getLogger(__name__)


BLEND = "Blend"

YEAR_PATTERN = re.compile(r"\b(19\d{2}|20\d{2})\b")
NV_PATTERN = re.compile(r"\bnv\b|\bnon[-\s]?vintage\b")
BLANC_DE_BLANCS_PATTERN = re.compile(r"\bblanc\s+de\s+blancs?\b")
BLANC_DE_NOIRS_PATTERN = re.compile(r"\bblanc\s+de\s+noirs?\b")

# Matched against accent-folded text, so "crémant" and "cremant" both hit
SPARKLING_PATTERN = re.compile(
    r"\b(champagne|epernay|methode\s+traditionnelle|methode\s+champenoise|"
    r"traditional\s+method|sparkling|cremant|prosecco|cava|spumante)\b"
)

STYLE_WORDS = [
    "extra brut", "brut nature", "brut", "demi-sec", "sec",
    "dosage", "cuvee", "millesime",
]

# Keyword -> canonical grape name. Longer keywords are consumed first so
# "cabernet franc" never also counts as "cabernet".
VARIETY_KEYWORDS = {
    "cabernet sauvignon": "Cabernet Sauvignon",
    "cabernet franc": "Cabernet Franc",
    "cabernet": "Cabernet Sauvignon",
    "sauvignon blanc": "Sauvignon Blanc",
    "chardonnay": "Chardonnay",
    "riesling": "Riesling",
    "pinot noir": "Pinot Noir",
    "pinot meunier": "Pinot Meunier",
    "pinot grigio": "Pinot Grigio",
    "pinot gris": "Pinot Gris",
    "merlot": "Merlot",
    "zinfandel": "Zinfandel",
    "primitivo": "Primitivo",
    "syrah": "Syrah",
    "shiraz": "Syrah",
    "sangiovese": "Sangiovese",
    "nebbiolo": "Nebbiolo",
    "tempranillo": "Tempranillo",
    "grenache": "Grenache",
    "garnacha": "Grenache",
    "gamay": "Gamay",
    "chenin": "Chenin Blanc",
    "semillon": "Semillon",
    "malbec": "Malbec",
    "viognier": "Viognier",
}

SINGLE_VARIETY_CONFIDENCE = 0.6
BLEND_CONFIDENCE = 0.5
BLANC_DE_BLANCS_CONFIDENCE = 0.5
BLANC_DE_NOIRS_CONFIDENCE = 0.45

NV_MARKER_CONFIDENCE = 0.9
SPARKLING_NV_CONFIDENCE = 0.5
YEAR_CONFIDENCE = 0.7


@dataclass(frozen=True)
class HintConfidence:
    """Heuristic confidence for the variety and vintage hints (0-1)."""
    variety: float = 0.0
    vintage: float = 0.0


@dataclass(frozen=True)
class LabelHints:
    """Structured hints inferred from label text."""
    vintage_year: Optional[int] = None
    is_non_vintage: bool = False
    inferred_variety: Optional[str] = None
    inferred_varieties: Tuple[str, ...] = ()
    confidence: HintConfidence = field(default_factory=HintConfidence)
    is_sparkling: bool = False
    style_words: Tuple[str, ...] = ()
    signals: Tuple[str, ...] = ()

    @property
    def has_vintage_signal(self) -> bool:
        """True when the label said something about the vintage."""
        return self.is_non_vintage or self.vintage_year is not None


def normalize_label_text(text: str) -> str:
    """Lower-case and collapse whitespace."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.lower()).strip()


def fold_accents(text: str) -> str:
    """Strip combining accents: "épernay" -> "epernay"."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def canonical_variety(name: Optional[str]) -> Optional[str]:
    """Canonical grape name for a known synonym ("Shiraz" -> "Syrah")."""
    if not name:
        return None
    key = fold_accents(normalize_label_text(name))
    return VARIETY_KEYWORDS.get(key, name.strip())


def find_vintage_year(
    text: str,
    year_floor: int,
    current_year: int,
) -> Optional[int]:
    """
    Return the first plausible vintage year in the text.

    Args:
        text: Normalized label text
        year_floor: Earliest accepted year (inclusive)
        current_year: Latest accepted year (inclusive)

    Returns:
        The first year within [year_floor, current_year], or None
    """
    for match in YEAR_PATTERN.finditer(text):
        year = int(match.group(1))
        if year_floor <= year <= current_year:
            return year
    return None


def has_nv_marker(text: str) -> bool:
    """Check for an explicit NV / non-vintage marker."""
    return bool(NV_PATTERN.search(normalize_label_text(text)))


def detect_sparkling(text: str) -> bool:
    """Check for Champagne / sparkling-wine cues (accent-tolerant)."""
    return bool(SPARKLING_PATTERN.search(fold_accents(normalize_label_text(text))))


def find_style_words(text: str) -> List[str]:
    """Style words (brut, dosage, cuvée...) present in the text."""
    folded = fold_accents(normalize_label_text(text))
    found = []
    for word in STYLE_WORDS:
        pattern = r"\b" + re.escape(word) + r"\b"
        if re.search(pattern, folded):
            found.append(word)
            folded = re.sub(pattern, " ", folded)
    return found


def scan_variety_keywords(text: str) -> List[str]:
    """
    Collect canonical grape names found as substrings of the text.

    Results are ordered by first position in the text and de-duplicated.
    """
    working = fold_accents(normalize_label_text(text))
    hits: List[Tuple[int, str]] = []
    for keyword in sorted(VARIETY_KEYWORDS, key=len, reverse=True):
        pos = working.find(keyword)
        if pos < 0:
            continue
        hits.append((pos, VARIETY_KEYWORDS[keyword]))
        # Blank out the keyword so shorter keywords can't re-match inside it
        working = working.replace(keyword, " " * len(keyword))

    ordered = []
    for _, name in sorted(hits):
        if name not in ordered:
            ordered.append(name)
    return ordered


def _infer_variety(text: str, signals: List[str]) -> Tuple[Optional[str], List[str], float]:
    """Decide inferred variety, backing varieties and confidence."""
    seeds: List[str] = []
    seed_confidence = 0.0
    if BLANC_DE_BLANCS_PATTERN.search(text):
        signals.append("blanc de blancs")
        seeds = ["Chardonnay"]
        seed_confidence = BLANC_DE_BLANCS_CONFIDENCE
    elif BLANC_DE_NOIRS_PATTERN.search(text):
        signals.append("blanc de noirs")
        seeds = ["Pinot Noir", "Pinot Meunier"]
        seed_confidence = BLANC_DE_NOIRS_CONFIDENCE

    keywords = scan_variety_keywords(text)
    signals.extend(f"found:{name.lower()}" for name in keywords)

    if keywords:
        varieties = list(seeds)
        for name in keywords:
            if name not in varieties:
                varieties.append(name)
        if len(varieties) == 1:
            return varieties[0], varieties, SINGLE_VARIETY_CONFIDENCE
        return BLEND, varieties, BLEND_CONFIDENCE

    if len(seeds) == 1:
        return seeds[0], seeds, seed_confidence
    if seeds:
        return BLEND, seeds, seed_confidence
    return None, [], 0.0


def extract_hints(
    text: str,
    year_floor: Optional[int] = None,
    current_year: Optional[int] = None,
) -> LabelHints:
    """
    Extract vintage, variety and style hints from OCR label text.

    Never raises; text with no signal yields empty hints with zero confidence.

    Args:
        text: Raw OCR text
        year_floor: Earliest accepted vintage (defaults to settings)
        current_year: Latest accepted vintage (defaults to this year)

    Returns:
        LabelHints
    """
    if year_floor is None:
        year_floor = get_settings().vintage_year_floor
    if current_year is None:
        current_year = date.today().year

    normalized = normalize_label_text(text or "")
    signals: List[str] = []

    nv_marker = has_nv_marker(normalized)
    if nv_marker:
        signals.append("nv-marker")
    sparkling = detect_sparkling(normalized)
    if sparkling:
        signals.append("sparkling")
    style_words = find_style_words(normalized)
    if style_words:
        signals.append("style-words")

    year = None if nv_marker else find_vintage_year(normalized, year_floor, current_year)
    # Most sparkling wines without a printed year are NV
    is_non_vintage = nv_marker or (sparkling and year is None)

    if nv_marker:
        vintage_confidence = NV_MARKER_CONFIDENCE
    elif year is not None:
        vintage_confidence = YEAR_CONFIDENCE
    elif is_non_vintage:
        vintage_confidence = SPARKLING_NV_CONFIDENCE
    else:
        vintage_confidence = 0.0

    variety, varieties, variety_confidence = _infer_variety(normalized, signals)

    return LabelHints(
        vintage_year=year,
        is_non_vintage=is_non_vintage,
        inferred_variety=variety,
        inferred_varieties=tuple(varieties),
        confidence=HintConfidence(variety=variety_confidence, vintage=vintage_confidence),
        is_sparkling=sparkling,
        style_words=tuple(style_words),
        signals=tuple(signals),
    )
