"""Old World / New World classification of wine-producing countries."""

from typing import Optional


OLD_WORLD_LABEL = "Old World"
NEW_WORLD_LABEL = "New World"
WORLD_OPTIONS = [OLD_WORLD_LABEL, NEW_WORLD_LABEL]

# Europe and the Caucasus
OLD_WORLD_COUNTRIES = {
    "france", "italy", "spain", "germany", "portugal", "austria",
    "greece", "hungary", "georgia", "armenia", "slovenia", "croatia",
    "switzerland", "romania", "bulgaria", "moldova", "czech republic",
    "slovakia", "serbia", "england", "united kingdom", "luxembourg",
}

# Americas, Oceania and Southern Africa
NEW_WORLD_COUNTRIES = {
    "usa", "us", "united states", "united states of america", "canada",
    "mexico", "chile", "argentina", "uruguay", "brazil",
    "australia", "new zealand", "south africa",
}


def world_from_country(country: Optional[str]) -> Optional[str]:
    """
    Classify a country as "old" or "new" world.

    Unknown or missing countries return None rather than guessing.
    """
    if not country:
        return None
    c = " ".join(country.lower().split())
    if c in OLD_WORLD_COUNTRIES:
        return "old"
    if c in NEW_WORLD_COUNTRIES:
        return "new"
    return None


def world_label(world: Optional[str]) -> Optional[str]:
    """Map a stored world code ("old"/"new") to its option label."""
    if world == "old":
        return OLD_WORLD_LABEL
    if world == "new":
        return NEW_WORLD_LABEL
    return None
