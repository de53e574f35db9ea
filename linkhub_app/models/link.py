from enum import Enum

from linkhub_app.models.base import StoreRecord


class LinkType(str, Enum):
    """Link kinds the editor offers"""
    WEBSITE = "website"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    LINKEDIN = "linkedin"
    WHATSAPP = "whatsapp"


class Link(StoreRecord):
    """
    Link record stored at link:<id>, indexed by user:<userId>:links.

    position orders links within their owner's set. Nothing keeps
    positions dense or unique, readers sort by (position, id).
    """
    id: str
    user_id: str
    title: str = "New Link"
    url: str = ""
    type: str = LinkType.WEBSITE.value
    is_public: bool = True
    position: int = 0
    created_at: int
    updated_at: int
    clicks: int = 0
