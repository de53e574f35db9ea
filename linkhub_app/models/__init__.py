"""
Store records for LinkHub.

Each record maps onto one store hash; the key layout lives in
linkhub_app.store.keys.
"""

from .user import User
from .link import Link, LinkType
from .profile import Profile, ProfileAnalytics

__all__ = ["User", "Link", "LinkType", "Profile", "ProfileAnalytics"]
