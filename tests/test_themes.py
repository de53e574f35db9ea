"""
Tests for the theme catalog.
"""

import pytest
from pydantic import ValidationError

from linkhub_app.models.profile import DEFAULT_THEME
from linkhub_app.services.themes import THEMES, get_theme, is_known_theme, list_themes


def test_catalog_has_eight_themes():
    themes = list_themes()

    assert len(themes) == 8
    assert [theme.id for theme in themes][:2] == ["default", "dark"]
    assert len({theme.id for theme in themes}) == 8


def test_default_theme_is_in_catalog():
    assert is_known_theme(DEFAULT_THEME)
    assert get_theme(DEFAULT_THEME).name == "Default"


def test_unknown_theme_falls_back_to_default():
    assert is_known_theme("vaporwave") is False
    assert get_theme("vaporwave") == THEMES[DEFAULT_THEME]


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        THEMES["custom"] = THEMES[DEFAULT_THEME]


def test_themes_are_frozen():
    with pytest.raises(ValidationError):
        THEMES["dark"].name = "Light"


def test_list_is_a_copy():
    themes = list_themes()
    themes.clear()

    assert len(list_themes()) == 8
