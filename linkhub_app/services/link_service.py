from typing import Any, Iterable, List, Mapping, Optional, Tuple

import structlog
from pydantic import ValidationError

from linkhub_app.models.base import generate_id, now_ms
from linkhub_app.models.link import Link, LinkType
from linkhub_app.store.keys import link_clicks_key, link_key, user_key, user_links_key
from linkhub_app.store.strategies import KeyValueStore, StoreError

logger = structlog.get_logger()

# Fields callers may change through update_link()
MUTABLE_FIELDS = ("title", "url", "type", "is_public", "position")


def link_from_store(data) -> Optional[Link]:
    """Build a Link from a raw link hash, None if missing or incomplete"""
    if not data:
        return None
    try:
        return Link.model_validate(data)
    except ValidationError:
        return None


def _sort_key(link: Link) -> Tuple[int, str]:
    # Positions can collide, the id keeps the order deterministic
    return link.position, link.id


class LinkService:
    """
    Link store: link:<id> hashes plus the user:<userId>:links id set.

    Ownership is not checked here; the API layer makes sure only the
    owner mutates a link.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def create_link(
        self,
        user_id: str,
        title: Optional[str] = None,
        url: Optional[str] = None,
        type: Optional[str] = None,
        is_public: Optional[bool] = None,
        position: Optional[int] = None
    ) -> Link:
        """
        Create a link for a user.

        There is no uniqueness constraint, so this only fails if the
        store does (StoreError propagates).
        """
        timestamp = now_ms()
        link = Link(
            id=generate_id("link"),
            user_id=user_id,
            title=title or "New Link",
            url=url or "",
            type=type or LinkType.WEBSITE.value,
            is_public=True if is_public is None else is_public,
            position=position or 0,
            created_at=timestamp,
            updated_at=timestamp,
            clicks=0,
        )

        await self.store.hset(link_key(link.id), link.to_store())
        await self.store.sadd(user_links_key(user_id), link.id)

        logger.info("link_created", link_id=link.id, user_id=user_id)
        return link

    async def get_link(self, link_id: str) -> Optional[Link]:
        try:
            data = await self.store.hgetall(link_key(link_id))
        except StoreError as e:
            logger.error("get_link_failed", link_id=link_id, error=str(e))
            return None
        return link_from_store(data)

    async def get_links_by_user(self, user_id: str) -> List[Link]:
        """
        All links owned by a user, ordered by position.

        Note: one read per link (the id set is fetched first).
        """
        try:
            link_ids = await self.store.smembers(user_links_key(user_id))
            links = []
            for link_id in link_ids:
                link = link_from_store(await self.store.hgetall(link_key(link_id)))
                if link:
                    links.append(link)
        except StoreError as e:
            logger.error("get_links_failed", user_id=user_id, error=str(e))
            return []

        return sorted(links, key=_sort_key)

    async def update_link(self, link_id: str, fields: Mapping[str, Any]) -> Optional[Link]:
        """
        Merge partial fields into an existing link and bump updated_at.

        Only the changed fields are written back, so a concurrent click
        increment is never overwritten.

        Returns:
            The updated link, or None if it does not exist
        """
        changes = {name: value for name, value in fields.items() if name in MUTABLE_FIELDS}

        try:
            existing = link_from_store(await self.store.hgetall(link_key(link_id)))
            if not existing:
                return None

            updated = Link.model_validate(
                {**existing.model_dump(), **changes, "updated_at": now_ms()}
            )
            written = updated.model_dump(by_alias=True, include=set(changes) | {"updated_at"})
            await self.store.hset(link_key(link_id), written)
            return updated

        except StoreError as e:
            logger.error("update_link_failed", link_id=link_id, error=str(e))
            return None

    async def delete_link(self, link_id: str, user_id: str) -> bool:
        """Remove a link from its owner's set and delete it with its click log"""
        try:
            await self.store.srem(user_links_key(user_id), link_id)
            await self.store.delete(link_key(link_id), link_clicks_key(link_id))
        except StoreError as e:
            logger.error("delete_link_failed", link_id=link_id, error=str(e))
            return False

        logger.info("link_deleted", link_id=link_id, user_id=user_id)
        return True

    async def record_click(self, link_id: str) -> Optional[int]:
        """
        Count a click.

        The counter is incremented atomically; the timestamp is then
        appended to link:<id>:clicks on a best-effort basis, so the log
        can lag the counter. Clicks landing in the same millisecond
        share one log entry.

        Returns:
            New click count, None if the link does not exist
        """
        try:
            if not await self.store.exists(link_key(link_id)):
                return None
            clicks = await self.store.hincrby(link_key(link_id), "clicks", 1)
        except StoreError as e:
            logger.error("record_click_failed", link_id=link_id, error=str(e))
            return None

        timestamp = now_ms()
        try:
            await self.store.zadd(link_clicks_key(link_id), {str(timestamp): timestamp})
        except StoreError as e:
            logger.warning("click_log_write_failed", link_id=link_id, error=str(e))

        return clicks

    async def get_public_links_by_username(self, username: str) -> List[Link]:
        """Public links of a user, ordered by position"""
        try:
            user_id = await self.store.hget(user_key(username), "id")
        except StoreError as e:
            logger.error("get_public_links_failed", username=username, error=str(e))
            return []
        if not user_id:
            return []

        links = await self.get_links_by_user(user_id)
        return [link for link in links if link.is_public is True]

    async def update_positions(self, positions: Iterable[Tuple[str, int]]) -> bool:
        """
        Apply a reordering one link at a time, in the given order.

        Not atomic as a batch: a failure part way leaves the earlier
        links moved.

        Returns:
            True if every link was updated
        """
        all_updated = True
        for link_id, position in positions:
            if await self.update_link(link_id, {"position": position}) is None:
                logger.warning("reorder_link_missing", link_id=link_id)
                all_updated = False
        return all_updated
