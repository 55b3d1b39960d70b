"""Helpers for building multiple-choice option lists."""

import random
from typing import Iterable, List, Optional, Tuple


def same_choice(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive, whitespace-trimmed equality."""
    if a is None or b is None:
        return False
    return a.strip().casefold() == b.strip().casefold()


def unique_choices(items: Iterable[Optional[str]]) -> List[str]:
    """Trim, drop blanks, and de-duplicate case-insensitively (first spelling wins)."""
    seen = set()
    result = []
    for item in items:
        if item is None:
            continue
        s = str(item).strip()
        key = s.casefold()
        if not s or key in seen:
            continue
        seen.add(key)
        result.append(s)
    return result


def index_of_choice(options: List[str], value: Optional[str]) -> Optional[int]:
    for i, option in enumerate(options):
        if same_choice(option, value):
            return i
    return None


def ensure_options(
    correct: Optional[str],
    pool: Iterable[Optional[str]],
    fallback: Iterable[Optional[str]],
    count: int,
    rng: random.Random,
) -> Tuple[List[str], Optional[int]]:
    """
    Build a shuffled option list that always contains the correct value.

    Distractors are drawn at random from the pool; if the pool runs short,
    the fallback list pads (in order) up to `count`. The correct value is
    pinned before the cap is applied, so it can never be truncated away.

    Args:
        correct: Correct answer, or None when there is nothing to score
        pool: Preferred distractor source (e.g. live catalog lookup)
        fallback: Fixed seed list used when the pool is short or empty
        count: Target number of options
        rng: Random source for sampling and ordering

    Returns:
        (options, correct_index); correct_index is None without a correct value
    """
    correct = correct.strip() if correct and correct.strip() else None
    chosen: List[str] = [correct] if correct else []

    distractors = [c for c in unique_choices(pool) if not same_choice(c, correct)]
    rng.shuffle(distractors)
    for candidate in distractors:
        if len(chosen) >= count:
            break
        chosen.append(candidate)

    for candidate in unique_choices(fallback):
        if len(chosen) >= count:
            break
        if index_of_choice(chosen, candidate) is None:
            chosen.append(candidate)

    rng.shuffle(chosen)
    return chosen, index_of_choice(chosen, correct)
