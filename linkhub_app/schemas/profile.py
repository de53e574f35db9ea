from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from linkhub_app.models.link import Link
from linkhub_app.models.profile import Profile
from linkhub_app.schemas.common import CamelModel
from linkhub_app.services.themes import Theme, is_known_theme


class ProfileUpdate(CamelModel):
    """
    Editor form. Omitted (or null) fields keep their current value;
    customization keys are merged into the stored ones.
    """
    display_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    theme: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
    customization: Optional[Dict[str, Any]] = Field(
        None,
        description="backgroundColor, textColor, fontFamily, buttonStyle, buttonShape, ..."
    )

    @field_validator("theme")
    @classmethod
    def validate_theme(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_known_theme(value):
            raise ValueError(f"Unknown theme: {value}")
        return value


class PublicProfileResponse(CamelModel):
    """Everything the public profile page renders"""
    profile: Profile
    theme: Theme
    links: List[Link]


class ImageUploadResponse(CamelModel):
    success: bool = True
    image_url: str
