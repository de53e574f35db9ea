from typing import Optional

from linkhub_app.models.base import StoreRecord


class User(StoreRecord):
    """
    User record stored at user:<username>.

    The hashed password lives in the same hash under "password" but is
    never part of this model: services strip it on every read.
    """
    id: str
    username: str
    email: str
    display_name: str
    bio: str = ""
    profile_image: Optional[str] = None
    is_admin: bool = False
    created_at: int
