"""Shared fixtures: an in-memory catalog and seeded builders."""

import random

import pytest

from wine_options.services.catalog import CatalogError
from wine_options.services.matching import CandidateMatcher
from wine_options.services.options import OptionBuilder
from wine_options.services.round import RoundService


CURRENT_YEAR = 2025

BORDEAUX_ROW = {
    "id": "w1",
    "display_name": "Château Example Bordeaux",
    "country": "France",
    "region": "Bordeaux",
    "appellation": "Pauillac",
    "variety": "Merlot",
    "vintage": 2015,
}

CHAMPAGNE_ROW = {
    "id": "w2",
    "display_name": "Maison Exemple Champagne Brut",
    "country": "France",
    "region": "Champagne",
    "appellation": None,
    "variety": "Blend",
    "vintage": None,
}

NAPA_ROW = {
    "id": "w3",
    "display_name": "Example Ridge Cabernet",
    "country": "USA",
    "region": "Napa Valley",
    "appellation": "",
    "variety": "Cabernet Sauvignon",
    "vintage": 2019,
}


class FakeCatalog:
    """In-memory stand-in for CatalogClient."""

    def __init__(self, rows=None, fail=False):
        self.rows = list(rows or [])
        self.fail = fail
        self.countries = ["France", "Italy", "Spain", "USA", "Australia", "Chile"]
        self.regions = {
            "France": ["Bordeaux", "Burgundy", "Champagne", "Rhône", "Loire"],
            "USA": ["Napa Valley", "Sonoma", "Willamette Valley"],
        }
        self.subregions = {
            ("France", "Bordeaux"): ["Pauillac", "Margaux", "Saint-Julien", "Pomerol"],
        }
        self.search_calls = []

    def _check(self):
        if self.fail:
            raise CatalogError("catalog down")

    async def search_wines(self, tokens, variety=None, vintage=None, non_vintage=False, limit=None):
        self._check()
        self.search_calls.append(
            {"tokens": list(tokens), "variety": variety, "vintage": vintage, "non_vintage": non_vintage}
        )
        results = []
        for row in self.rows:
            name = row["display_name"].lower()
            if tokens and not any(t.lower() in name for t in tokens):
                continue
            if variety and variety.lower() not in (row.get("variety") or "").lower():
                continue
            if non_vintage and row.get("vintage") is not None:
                continue
            if not non_vintage and vintage is not None and row.get("vintage") != vintage:
                continue
            results.append(dict(row))
        return results[:limit or 10]

    async def get_countries(self):
        self._check()
        return list(self.countries)

    async def get_regions(self, country):
        self._check()
        return list(self.regions.get(country, []))

    async def get_subregions(self, country, region):
        self._check()
        return list(self.subregions.get((country, region), []))


@pytest.fixture
def fake_catalog():
    return FakeCatalog(rows=[BORDEAUX_ROW, CHAMPAGNE_ROW, NAPA_ROW])


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def builder(fake_catalog, rng):
    return OptionBuilder(catalog=fake_catalog, rng=rng, current_year=CURRENT_YEAR)


@pytest.fixture
def matcher(fake_catalog):
    return CandidateMatcher(catalog=fake_catalog)


@pytest.fixture
def round_service(matcher, builder):
    return RoundService(matcher=matcher, builder=builder)
