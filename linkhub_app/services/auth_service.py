import secrets
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from linkhub_app.config import settings
from linkhub_app.models.base import generate_id, now_ms
from linkhub_app.models.user import User
from linkhub_app.services.passwords import hash_password, verify_password
from linkhub_app.store.keys import USERS_KEY, email_key, session_key, user_key
from linkhub_app.store.strategies import KeyValueStore, StoreError

logger = structlog.get_logger()


def user_from_store(data: Optional[Dict[str, Any]]) -> Optional[User]:
    """
    Build a User from a raw user hash, dropping the password field.

    Returns None for missing hashes and for half-written ones (a
    registration still in flight only holds the username field).
    """
    if not data:
        return None
    fields = dict(data)
    fields.pop("password", None)
    try:
        return User.model_validate(fields)
    except ValidationError:
        return None


class AuthService:
    """
    User directory and session store.

    Uniqueness of usernames and emails is enforced by the store itself:
    the username is claimed with HSETNX on user:<username> and the email
    with SET NX on email:<email>, so two concurrent registrations can
    never both win.

    Lookups never raise. Missing records and store failures both come
    back as None/False; store failures are logged.
    """

    def __init__(self, store: KeyValueStore, session_ttl: Optional[int] = None):
        """
        Args:
            store: Key-value store strategy
            session_ttl: Session lifetime in seconds (defaults to settings)
        """
        self.store = store
        self.session_ttl = session_ttl or settings.session_ttl_seconds

    async def register(
        self,
        email: str,
        username: str,
        password: str,
        display_name: str = ""
    ) -> Optional[User]:
        """
        Create a new user.

        Process:
        1. Claim the username (HSETNX user:<username> username)
        2. Claim the email (SET email:<email> NX), release the username if taken
        3. Write the full user hash with the hashed password
        4. Add the username to the global users set

        Returns:
            The created user, or None if the username/email is taken
            or the store failed

        If the store fails before the full hash is written, the username
        and email claims made so far are released again.
        """
        claims: List[str] = []
        try:
            if not await self.store.hsetnx(user_key(username), "username", username):
                logger.info("register_username_taken", username=username)
                return None
            claims.append(user_key(username))

            if not await self.store.set(email_key(email), username, nx=True):
                await self.store.delete(user_key(username))
                logger.info("register_email_taken", username=username)
                return None
            claims.append(email_key(email))

            user = User(
                id=generate_id("user"),
                username=username,
                email=email,
                display_name=display_name or username,
                bio="",
                is_admin=False,
                created_at=now_ms(),
            )
            await self.store.hset(
                user_key(username),
                {**user.to_store(), "password": hash_password(password)},
            )
            # Complete from here on, fix_key_structure() restores the users set
            claims.clear()
            await self.store.sadd(USERS_KEY, username)

            logger.info("user_registered", username=username, user_id=user.id)
            return user

        except StoreError as e:
            logger.error("registration_failed", username=username, error=str(e))
            await self._release_claims(claims)
            return None

    async def _release_claims(self, keys: List[str]) -> None:
        if not keys:
            return
        try:
            await self.store.delete(*keys)
        except StoreError as e:
            # fix_key_structure() removes a leftover username claim
            logger.warning("registration_claims_not_released", keys=keys, error=str(e))

    async def login(self, username_or_email: str, password: str) -> Optional[User]:
        """
        Check credentials.

        Input containing "@" is resolved through the email index,
        anything else is treated as a username.

        Returns:
            The user without its password, or None on any mismatch
        """
        try:
            username = username_or_email
            if "@" in username_or_email:
                username = await self.store.get(email_key(username_or_email))
                if not username:
                    return None

            data = await self.store.hgetall(user_key(username))
            if not data or not verify_password(password, data.get("password")):
                return None

            return user_from_store(data)

        except StoreError as e:
            logger.error("login_failed", error=str(e))
            return None

    async def get_user(self, username: str) -> Optional[User]:
        try:
            return user_from_store(await self.store.hgetall(user_key(username)))
        except StoreError as e:
            logger.error("get_user_failed", username=username, error=str(e))
            return None

    async def create_session(self, username: str) -> Optional[str]:
        """
        Start a session for a user.

        Returns:
            Opaque session id (expires after session_ttl), None if the store failed
        """
        session_id = secrets.token_urlsafe(32)
        try:
            await self.store.set(session_key(session_id), username, ttl=self.session_ttl)
        except StoreError as e:
            logger.error("create_session_failed", username=username, error=str(e))
            return None
        return session_id

    async def get_user_by_session(self, session_id: Optional[str]) -> Optional[User]:
        """A session is valid while its key lives and its user still exists"""
        if not session_id:
            return None
        try:
            username = await self.store.get(session_key(session_id))
            if not username:
                return None
            return user_from_store(await self.store.hgetall(user_key(username)))
        except StoreError as e:
            logger.error("session_lookup_failed", error=str(e))
            return None

    async def logout(self, session_id: Optional[str]) -> None:
        """Delete the session key (idempotent)"""
        if not session_id:
            return
        try:
            await self.store.delete(session_key(session_id))
        except StoreError as e:
            logger.error("logout_failed", error=str(e))

    async def initialize_admin(self) -> bool:
        """
        Make sure the admin account exists.

        Safe to call on every start: the account is only written when
        this call wins the username claim.

        Returns:
            True if the admin account was created by this call
        """
        username = settings.admin_username
        if settings.is_production and settings.admin_password == "admin123":
            logger.warning("admin_default_password_in_production", username=username)

        try:
            if not await self.store.hsetnx(user_key(username), "username", username):
                return False

            admin = User(
                id="admin_1",
                username=username,
                email=settings.admin_email,
                display_name="Admin",
                bio="LinkHub Administrator",
                is_admin=True,
                created_at=now_ms(),
            )
            await self.store.hset(
                user_key(username),
                {**admin.to_store(), "password": hash_password(settings.admin_password)},
            )
            await self.store.set(email_key(settings.admin_email), username)
            await self.store.sadd(USERS_KEY, username)

            logger.info("admin_account_created", username=username)
            return True

        except StoreError as e:
            logger.error("admin_bootstrap_failed", error=str(e))
            return False
