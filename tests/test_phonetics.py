"""
Tests for Orthographic Analysis
===============================
Letter and syllable counting and diacritic folding in prenomkit/phonetics.py.
"""

import pytest

from prenomkit.phonetics import clean_name, fold_name, letter_count, strip_diacritics, syllable_count


class TestLetterCount:
    """Tests for letter_count."""

    def test_plain_name(self):
        assert letter_count("Emma") == 4

    def test_accented_letters_count(self):
        assert letter_count("Léa") == 3
        assert letter_count("Raphaël") == 7

    def test_ignores_hyphens_spaces_apostrophes(self):
        assert letter_count("Jean-Pierre") == 10
        assert letter_count("D'Artagnan") == 9
        assert letter_count("Marie Claire") == 11

    def test_empty(self):
        assert letter_count("") == 0


class TestSyllableCount:
    """Tests for the syllable heuristic."""

    @pytest.mark.parametrize("name,expected", [
        ("Emma", 2),
        ("Milo", 2),
        ("Nathan", 2),
        ("Léa", 1),
        ("Louise", 1),
        ("Jade", 1),
        ("Gabriel", 2),
        ("Raphaël", 2),
        ("Alexandre", 3),
        ("Emmanuel", 3),
    ])
    def test_known_counts(self, name, expected):
        assert syllable_count(name) == expected

    def test_diphthong_rounds_half_up(self):
        """e-a-ue gives 3 runs minus 0.5 = 2.5, which rounds to 3."""
        assert syllable_count("Emmanuel") == 3

    def test_final_accented_e_is_not_silent(self):
        assert syllable_count("René") == 2
        assert syllable_count("Aimé") == 2

    def test_floor_at_one(self):
        assert syllable_count("") == 1
        assert syllable_count("Brr") == 1
        assert syllable_count("---") == 1

    def test_case_and_punctuation_do_not_matter(self):
        assert syllable_count("JEAN-PIERRE") == syllable_count("jean pierre")

    def test_deterministic(self):
        assert all(syllable_count("Ophélie") == syllable_count("Ophélie") for _ in range(5))


class TestFolding:
    """Tests for diacritic stripping and comparison keys."""

    def test_strip_diacritics(self):
        assert strip_diacritics("Éloïse") == "Eloise"
        assert strip_diacritics("Raphaël") == "Raphael"
        assert strip_diacritics("François") == "Francois"

    def test_fold_name(self):
        assert fold_name("  Éloïse ") == fold_name("eloise") == "eloise"

    def test_clean_name(self):
        assert clean_name("Jean-Pierre") == "jeanpierre"
