"""Tests for label hint extraction."""

from datetime import date

import pytest

from wine_options.services.hints import (
    BLEND,
    LabelHints,
    canonical_variety,
    detect_sparkling,
    extract_hints,
    find_style_words,
    find_vintage_year,
    has_nv_marker,
    normalize_label_text,
    scan_variety_keywords,
)


class TestNormalization:
    """Test text normalization."""

    def test_lowercases_and_collapses_whitespace(self):
        assert normalize_label_text("  Château\n\tMARGAUX   2010 ") == "château margaux 2010"

    def test_empty(self):
        assert normalize_label_text("") == ""


class TestVintageYear:
    """Test vintage year detection."""

    def test_single_year(self):
        assert extract_hints("Barolo 2016 Nebbiolo").vintage_year == 2016

    def test_first_plausible_year_wins(self):
        assert find_vintage_year("bottled 2019 harvest 2017", 1950, 2025) == 2019

    def test_year_below_floor_ignored(self):
        """Founding dates like 'since 1898' are not vintages."""
        hints = extract_hints("Since 1898 - Rioja 2018", year_floor=1950, current_year=2025)
        assert hints.vintage_year == 2018

    def test_floor_is_inclusive(self):
        assert extract_hints("Port 1950", year_floor=1950, current_year=2025).vintage_year == 1950
        assert extract_hints("Port 1949", year_floor=1950, current_year=2025).vintage_year is None

    def test_future_year_ignored(self):
        assert extract_hints("Reserve 2031", current_year=2025).vintage_year is None

    def test_current_year_accepted(self):
        this_year = date.today().year
        assert extract_hints(f"Nouveau {this_year}").vintage_year == this_year

    def test_default_floor_is_1950(self):
        assert extract_hints("Old bottle 1955", current_year=2025).vintage_year == 1955

    def test_year_inside_longer_number_ignored(self):
        assert extract_hints("Lot 120155 bottles", current_year=2025).vintage_year is None

    def test_no_year(self):
        hints = extract_hints("Some Estate Red Wine")
        assert hints.vintage_year is None
        assert hints.confidence.vintage == 0.0


class TestNonVintage:
    """Test NV detection."""

    @pytest.mark.parametrize("text", [
        "Brut NV",
        "brut nv",
        "Non-Vintage Cuvée",
        "NON VINTAGE",
        "nonvintage sparkling",
    ])
    def test_nv_markers(self, text):
        hints = extract_hints(text)
        assert hints.is_non_vintage is True
        assert hints.vintage_year is None

    def test_nv_discards_year(self):
        """A year next to an NV marker (e.g. disgorgement date) is not the vintage."""
        hints = extract_hints("NV Brut disgorged 2021")
        assert hints.is_non_vintage is True
        assert hints.vintage_year is None
        assert hints.confidence.vintage == 0.9

    def test_nv_not_matched_inside_words(self):
        assert has_nv_marker("envy of the valley") is False

    def test_champagne_without_year_is_nv(self):
        hints = extract_hints("Champagne Maison Exemple Brut")
        assert hints.is_non_vintage is True
        assert hints.vintage_year is None
        assert hints.confidence.vintage == 0.5

    def test_champagne_with_year_is_vintage(self):
        hints = extract_hints("Champagne Millésime 2012", current_year=2025)
        assert hints.is_non_vintage is False
        assert hints.vintage_year == 2012
        assert hints.confidence.vintage == 0.7


class TestSparklingCues:
    """Test sparkling-wine detection."""

    @pytest.mark.parametrize("text", [
        "CHAMPAGNE",
        "Épernay, France",
        "Epernay",
        "Méthode Traditionnelle",
        "Crémant de Loire",
        "Cremant d'Alsace",
        "Prosecco DOC",
        "Cava Brut",
        "Sparkling Wine",
    ])
    def test_cues_detected(self, text):
        assert detect_sparkling(text) is True

    def test_still_wine(self):
        assert detect_sparkling("Napa Valley Cabernet Sauvignon") is False

    def test_cava_not_matched_inside_words(self):
        assert detect_sparkling("excavation site vineyard") is False


class TestVarietyInference:
    """Test grape variety inference."""

    def test_blanc_de_blancs(self):
        hints = extract_hints("Blanc de Blancs 2015")
        assert hints.inferred_variety == "Chardonnay"
        assert hints.inferred_varieties == ("Chardonnay",)
        assert hints.confidence.variety == 0.5

    def test_blanc_de_noirs(self):
        hints = extract_hints("Blanc de Noirs NV")
        assert hints.inferred_variety == BLEND
        assert "Pinot Noir" in hints.inferred_varieties
        assert "Pinot Meunier" in hints.inferred_varieties
        assert hints.confidence.variety == 0.45

    def test_single_keyword(self):
        hints = extract_hints("Domaine Exemple Riesling Trocken")
        assert hints.inferred_variety == "Riesling"
        assert hints.inferred_varieties == ("Riesling",)
        assert hints.confidence.variety == 0.6

    def test_multiple_keywords_make_blend(self):
        hints = extract_hints("Grenache Syrah Mourvèdre")
        assert hints.inferred_variety == BLEND
        assert hints.inferred_varieties == ("Grenache", "Syrah")
        assert hints.confidence.variety == 0.5

    def test_blanc_de_blancs_plus_keyword(self):
        hints = extract_hints("Blanc de Blancs 100% Chardonnay")
        assert hints.inferred_variety == "Chardonnay"
        assert hints.confidence.variety == 0.6

    def test_longer_keyword_not_double_counted(self):
        assert scan_variety_keywords("cabernet franc") == ["Cabernet Franc"]
        assert scan_variety_keywords("cabernet sauvignon") == ["Cabernet Sauvignon"]

    def test_cabernet_alone(self):
        assert extract_hints("Estate Cabernet").inferred_variety == "Cabernet Sauvignon"

    def test_keyword_order_follows_text(self):
        assert scan_variety_keywords("merlot and cabernet franc") == ["Merlot", "Cabernet Franc"]

    def test_synonyms_collapse(self):
        """Garnacha and Grenache are the same grape."""
        hints = extract_hints("Garnacha / Grenache")
        assert hints.inferred_variety == "Grenache"

    def test_shiraz_is_syrah(self):
        hints = extract_hints("Barossa Syrah / Shiraz")
        assert hints.inferred_variety == "Syrah"
        assert hints.inferred_varieties == ("Syrah",)

    def test_canonical_variety(self):
        assert canonical_variety("Shiraz") == "Syrah"
        assert canonical_variety(" garnacha ") == "Grenache"
        assert canonical_variety("Mourvèdre") == "Mourvèdre"
        assert canonical_variety(None) is None

    def test_accented_keyword(self):
        assert extract_hints("Sémillon Barrel Fermented").inferred_variety == "Semillon"

    def test_no_variety(self):
        hints = extract_hints("Château Quelque Chose Grand Vin")
        assert hints.inferred_variety is None
        assert hints.inferred_varieties == ()
        assert hints.confidence.variety == 0.0

    def test_style_words_do_not_change_variety(self):
        hints = extract_hints("Brut Cuvée Dosage Zéro")
        assert hints.inferred_variety is None
        assert "style-words" in hints.signals
        assert "brut" in hints.style_words
        assert "cuvee" in hints.style_words


class TestStyleWords:
    """Test style word detection."""

    def test_demi_sec_not_counted_as_sec(self):
        assert find_style_words("Demi-Sec") == ["demi-sec"]

    def test_extra_brut(self):
        assert find_style_words("Extra Brut") == ["extra brut"]

    def test_sec_not_inside_words(self):
        assert find_style_words("second label") == []


class TestExtractHints:
    """Test the overall extraction contract."""

    def test_empty_text(self):
        hints = extract_hints("")
        assert hints == LabelHints()

    def test_none_text(self):
        assert extract_hints(None) == LabelHints()

    def test_idempotent(self):
        text = "Champagne Blanc de Noirs Brut NV Épernay"
        assert extract_hints(text) == extract_hints(text)

    def test_nv_marker_discards_years(self):
        hints = extract_hints("NV 2019 2020")
        assert not (hints.is_non_vintage and hints.vintage_year is not None)

    def test_three_grapes_make_a_blend(self):
        hints = extract_hints("Cabernet Sauvignon Merlot Cabernet Franc")
        assert len(hints.inferred_varieties) == 3
        assert hints.inferred_variety == BLEND

    def test_label_example(self):
        hints = extract_hints("CHÂTEAU EXAMPLE 2015 BORDEAUX FRANCE MERLOT")
        assert hints.vintage_year == 2015
        assert hints.is_non_vintage is False
        assert hints.inferred_variety == "Merlot"

    def test_no_signal(self):
        hints = extract_hints("Domaine Inconnu Grand Vin Rouge")
        assert hints.inferred_variety is None
        assert hints.vintage_year is None
        assert hints.is_non_vintage is False
        assert hints.has_vintage_signal is False
