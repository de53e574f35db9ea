from collections import Counter
from typing import Any, Dict, Mapping, Optional

import structlog
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from linkhub_app.blob.strategies import BlobStorage, BlobStorageError
from linkhub_app.config import settings
from linkhub_app.models.base import ms_to_date, now_ms
from linkhub_app.models.profile import (
    DEFAULT_THEME,
    Profile,
    ProfileAnalytics,
    default_customization,
)
from linkhub_app.models.user import User
from linkhub_app.services.auth_service import user_from_store
from linkhub_app.store.keys import profile_key, profile_views_key, user_key
from linkhub_app.store.strategies import KeyValueStore, StoreError

logger = structlog.get_logger()

DAY_MS = 24 * 60 * 60 * 1000

# Top-level fields callers may change through update_profile()
MUTABLE_FIELDS = ("display_name", "bio", "theme", "social_links")

# Fields mirrored onto the user record
USER_SYNCED_FIELDS = ("display_name", "bio")


def default_profile(user: User) -> Profile:
    """Profile materialized for a user that does not have one yet"""
    return Profile(
        user_id=user.id,
        username=user.username,
        display_name=user.display_name or user.username,
        bio=user.bio or "",
        theme=DEFAULT_THEME,
        profile_image=user.profile_image,
        customization=default_customization(),
        views=0,
        updated_at=now_ms(),
    )


class ProfileService:
    """
    Profile store and view analytics.

    Profiles are created lazily: the first get_profile() for a user
    writes a default profile, so reads are not side-effect free.
    """

    def __init__(self, store: KeyValueStore, blob_storage: Optional[BlobStorage] = None):
        """
        Args:
            store: Key-value store strategy
            blob_storage: Blob storage strategy (needed for image uploads)
        """
        self.store = store
        self.blob_storage = blob_storage

    async def get_profile(self, username: str) -> Optional[Profile]:
        """
        Get a profile, creating the default one on first access.

        Creation is a single atomic set-if-absent of every field, so
        concurrent first reads cannot clobber each other or a real update.

        Returns:
            The profile, or None if the user does not exist
        """
        try:
            profile = self._to_profile(await self.store.hgetall(profile_key(username)))
            if profile:
                return profile

            user = user_from_store(await self.store.hgetall(user_key(username)))
            if not user:
                return None

            if await self.store.hset_missing(profile_key(username), default_profile(user).to_store()):
                logger.info("profile_created", username=username)

            return self._to_profile(await self.store.hgetall(profile_key(username)))

        except StoreError as e:
            logger.error("get_profile_failed", username=username, error=str(e))
            return None

    async def update_profile(self, username: str, fields: Mapping[str, Any]) -> Optional[Profile]:
        """
        Update a profile.

        Top-level fields are replaced; customization is merged key by
        key (new keys added, given keys overwritten, others kept).
        None values count as "not provided". display_name and bio are
        copied onto the user record as well.

        Returns:
            The updated profile, or None if the user/profile does not exist
        """
        changes: Dict[str, Any] = {
            name: value
            for name, value in fields.items()
            if name in MUTABLE_FIELDS and value is not None
        }
        customization = {
            key: value
            for key, value in (fields.get("customization") or {}).items()
            if value is not None
        }

        existing = await self.get_profile(username)
        if not existing:
            return None

        try:
            updated = Profile.model_validate({
                **existing.model_dump(),
                **changes,
                "customization": {**existing.customization, **customization},
                "updated_at": now_ms(),
            })
            written = updated.model_dump(
                by_alias=True,
                include=set(changes) | {"customization", "updated_at"},
            )
            await self.store.hset(profile_key(username), written)

            synced = {
                name: value for name, value in changes.items() if name in USER_SYNCED_FIELDS
            }
            if synced:
                await self.store.hset(
                    user_key(username),
                    {to_camel(name): value for name, value in synced.items()},
                )

        except StoreError as e:
            logger.error("update_profile_failed", username=username, error=str(e))
            return None

        logger.info("profile_updated", username=username, fields=sorted(written))
        return updated

    async def upload_profile_image(
        self,
        username: str,
        data: bytes,
        content_type: str = "image/jpeg"
    ) -> Optional[str]:
        """
        Replace a user's profile image.

        Steps (not transactional):
        1. Delete the previous blob (failures are logged and ignored)
        2. Upload profiles/<username>/profile-<timestamp>.jpg
        3. Point both the profile and the user record at the new URL

        Returns:
            Public URL of the new image, None on failure
        """
        if self.blob_storage is None:
            logger.error("upload_without_blob_storage", username=username)
            return None

        profile = await self.get_profile(username)
        if not profile:
            return None

        if profile.profile_image:
            try:
                await self.blob_storage.delete(profile.profile_image)
            except BlobStorageError as e:
                logger.warning("previous_image_delete_failed", username=username, error=str(e))

        path = f"profiles/{username}/profile-{now_ms()}.jpg"
        try:
            url = await self.blob_storage.put(path, data, content_type=content_type)
            await self.store.hset(profile_key(username), {"profileImage": url})
            await self.store.hset(user_key(username), {"profileImage": url})
        except (BlobStorageError, StoreError) as e:
            logger.error("profile_image_upload_failed", username=username, error=str(e))
            return None

        logger.info("profile_image_uploaded", username=username, path=path)
        return url

    async def record_view(self, username: str) -> Optional[int]:
        """
        Count a profile view.

        Same pattern as link clicks: atomic counter increment, then a
        best-effort append to profile:<username>:views.

        Returns:
            New view count, None if the user does not exist
        """
        if not await self.get_profile(username):
            return None

        try:
            views = await self.store.hincrby(profile_key(username), "views", 1)
        except StoreError as e:
            logger.error("record_view_failed", username=username, error=str(e))
            return None

        timestamp = now_ms()
        try:
            await self.store.zadd(profile_views_key(username), {str(timestamp): timestamp})
        except StoreError as e:
            logger.warning("view_log_write_failed", username=username, error=str(e))

        return views

    async def get_analytics(self, username: str, days: Optional[int] = None) -> ProfileAnalytics:
        """
        Total views plus views per UTC day for the last `days` days.

        views comes from the counter, views_by_day from the event log,
        so the histogram can undercount if a log write ever failed.
        """
        days = days if days is not None else settings.analytics_default_days
        profile = await self.get_profile(username)
        total_views = profile.views if profile else 0

        start = now_ms() - days * DAY_MS
        try:
            events = await self.store.zrangebyscore(
                profile_views_key(username), start, "+inf", withscores=True
            )
        except StoreError as e:
            logger.error("get_analytics_failed", username=username, error=str(e))
            events = []

        # The score is the event time, members are opaque
        views_by_day = Counter(ms_to_date(score) for _, score in events)
        return ProfileAnalytics(views=total_views, views_by_day=dict(views_by_day))

    @staticmethod
    def _to_profile(data) -> Optional[Profile]:
        if not data:
            return None
        try:
            return Profile.model_validate(data)
        except ValidationError:
            return None
