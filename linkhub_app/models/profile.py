from typing import Any, Dict, Optional

from pydantic import Field

from linkhub_app.models.base import StoreRecord


DEFAULT_THEME = "default"

DEFAULT_CUSTOMIZATION: Dict[str, Any] = {
    "buttonStyle": "default",
    "buttonShape": "rounded",
    "profileLayout": "standard",
    "showLinkIcons": True,
    "showProfileStats": False,
}


def default_customization() -> Dict[str, Any]:
    return dict(DEFAULT_CUSTOMIZATION)


class Profile(StoreRecord):
    """
    Public profile stored at profile:<username>, one per user.

    customization is a free-form map (backgroundColor, textColor,
    fontFamily, buttonStyle, buttonShape, ...) that updates merge into
    key by key.
    """
    user_id: str
    username: str
    display_name: str
    bio: str = ""
    theme: str = DEFAULT_THEME
    profile_image: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
    customization: Dict[str, Any] = Field(default_factory=default_customization)
    views: int = 0
    updated_at: int


class ProfileAnalytics(StoreRecord):
    """Total views plus a per-day histogram rebuilt from the view log"""
    views: int = 0
    views_by_day: Dict[str, int] = Field(default_factory=dict)
