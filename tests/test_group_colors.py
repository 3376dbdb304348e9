"""Tests for the muscle group color lookup."""
import pytest

from routine_sheets_api.services.group_colors import GROUP_COLORS, NEUTRAL, color_for


@pytest.mark.parametrize("name", ["Pecho", "pecho", "PECHO", "  Pecho "])
def test_lookup_is_case_insensitive(name):
    assert color_for(name) == GROUP_COLORS["pecho"]


def test_known_groups():
    assert color_for("Espalda").token == "blue"
    assert color_for("Piernas").token == "teal"
    assert color_for("Hombros").token == "yellow"
    assert color_for("Brazos").token == "purple"
    assert color_for("Abdomen").token == "pink"
    assert color_for("Pecho").fill == "E43636"


@pytest.mark.parametrize("name", ["Glúteos", "", None])
def test_unknown_groups_get_neutral(name):
    assert color_for(name) is NEUTRAL
    assert color_for(name) == color_for(name)


def test_badge_classes_match_token():
    for color in GROUP_COLORS.values():
        assert f"bg-{color.token}-100" in color.badge
