"""
Key namespace shared with every other client of the store.

These names must not change: existing data is addressed through them.
"""

USERS_KEY = "users"


def user_key(username: str) -> str:
    return f"user:{username}"


def email_key(email: str) -> str:
    return f"email:{email}"


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


def link_key(link_id: str) -> str:
    return f"link:{link_id}"


def user_links_key(user_id: str) -> str:
    # Keyed by user *id*, not username
    return f"user:{user_id}:links"


def profile_key(username: str) -> str:
    return f"profile:{username}"


def profile_views_key(username: str) -> str:
    return f"profile:{username}:views"


def link_clicks_key(link_id: str) -> str:
    return f"link:{link_id}:clicks"
