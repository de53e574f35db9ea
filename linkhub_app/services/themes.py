"""
Static theme catalog.

Pure configuration: an immutable lookup table keyed by theme id with a
stable default entry. Profiles store only the theme id.
"""

from enum import Enum
from types import MappingProxyType
from typing import List, Mapping

from pydantic import ConfigDict

from linkhub_app.models.base import StoreRecord
from linkhub_app.models.profile import DEFAULT_THEME


class BackgroundType(str, Enum):
    SOLID = "solid"
    GRADIENT = "gradient"
    PATTERN = "pattern"


class Theme(StoreRecord):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    font_family: str
    button_style: str
    card_style: str
    background_type: BackgroundType


_THEMES = (
    Theme(
        id="default",
        name="Default",
        description="Clean and minimal design",
        font_family="font-sans",
        button_style="rounded-md",
        card_style="bg-white dark:bg-gray-800 shadow-sm",
        background_type=BackgroundType.SOLID,
    ),
    Theme(
        id="dark",
        name="Dark Mode",
        description="Sleek dark interface",
        font_family="font-sans",
        button_style="rounded-md",
        card_style="bg-gray-800 shadow-md",
        background_type=BackgroundType.SOLID,
    ),
    Theme(
        id="gradient-purple",
        name="Purple Gradient",
        description="Vibrant purple gradient background",
        font_family="font-sans",
        button_style="rounded-xl",
        card_style="bg-white/10 backdrop-blur-sm border border-white/20",
        background_type=BackgroundType.GRADIENT,
    ),
    Theme(
        id="gradient-blue",
        name="Ocean Blue",
        description="Calming blue gradient",
        font_family="font-sans",
        button_style="rounded-xl",
        card_style="bg-white/10 backdrop-blur-sm border border-white/20",
        background_type=BackgroundType.GRADIENT,
    ),
    Theme(
        id="neon",
        name="Neon",
        description="Vibrant neon theme with dark background",
        font_family="font-mono",
        button_style="rounded-none border-2 border-green-400",
        card_style="bg-gray-900 border-2 border-green-400",
        background_type=BackgroundType.SOLID,
    ),
    Theme(
        id="minimal",
        name="Minimal",
        description="Ultra-minimal design with focus on content",
        font_family="font-sans",
        button_style="rounded-none border border-gray-200 dark:border-gray-700",
        card_style="bg-white dark:bg-gray-900 border border-gray-200 dark:border-gray-700",
        background_type=BackgroundType.SOLID,
    ),
    Theme(
        id="retro",
        name="Retro",
        description="Vintage-inspired design",
        font_family="font-serif",
        button_style="rounded-md border-2 border-amber-800",
        card_style="bg-amber-100 border-2 border-amber-800",
        background_type=BackgroundType.PATTERN,
    ),
    Theme(
        id="nature",
        name="Nature",
        description="Earthy tones inspired by nature",
        font_family="font-sans",
        button_style="rounded-full",
        card_style="bg-white/10 backdrop-blur-sm border border-white/20",
        background_type=BackgroundType.GRADIENT,
    ),
)

THEMES: Mapping[str, Theme] = MappingProxyType({theme.id: theme for theme in _THEMES})


def list_themes() -> List[Theme]:
    """All themes in catalog order"""
    return list(_THEMES)


def is_known_theme(theme_id: str) -> bool:
    return theme_id in THEMES


def get_theme(theme_id: str) -> Theme:
    """Theme by id, unknown ids resolve to the default theme"""
    return THEMES.get(theme_id, THEMES[DEFAULT_THEME])
