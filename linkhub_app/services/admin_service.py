from typing import List, Optional

import structlog

from linkhub_app.models.base import StoreRecord
from linkhub_app.models.user import User
from linkhub_app.services.auth_service import user_from_store
from linkhub_app.services.link_service import link_from_store
from linkhub_app.services.profile_service import ProfileService
from linkhub_app.store.keys import (
    USERS_KEY,
    email_key,
    link_clicks_key,
    link_key,
    profile_key,
    profile_views_key,
    user_key,
    user_links_key,
)
from linkhub_app.store.strategies import KeyValueStore, StoreError

logger = structlog.get_logger()


class SystemStats(StoreRecord):
    total_users: int = 0
    total_links: int = 0
    total_views: int = 0
    total_clicks: int = 0


class RepairReport(StoreRecord):
    """What a fix_key_structure() pass changed"""
    users_checked: int = 0
    profiles_created: int = 0
    email_indexes_restored: int = 0
    users_reindexed: int = 0
    stale_claims_removed: int = 0
    links_reindexed: int = 0


class AdminService:
    """
    Administrative utilities.

    Everything here walks the whole keyspace or every user one key at
    a time (no pagination), so it is meant for the admin dashboard and
    maintenance, not for request hot paths.
    """

    def __init__(self, store: KeyValueStore, profile_service: ProfileService):
        self.store = store
        self.profile_service = profile_service

    async def get_all_users(self) -> List[User]:
        """Every user in the users set, without passwords"""
        try:
            users = []
            for username in sorted(await self.store.smembers(USERS_KEY)):
                user = user_from_store(await self.store.hgetall(user_key(username)))
                if user:
                    users.append(user)
            return users
        except StoreError as e:
            logger.error("get_all_users_failed", error=str(e))
            return []

    async def get_system_stats(self) -> SystemStats:
        """Totals across all users, their profiles and every owned link"""
        stats = SystemStats()
        try:
            users = await self.get_all_users()
            stats.total_users = len(users)

            for user in users:
                link_ids = await self.store.smembers(user_links_key(user.id))
                stats.total_links += len(link_ids)

                views = await self.store.hget(profile_key(user.username), "views")
                stats.total_views += int(views or 0)

                for link_id in link_ids:
                    clicks = await self.store.hget(link_key(link_id), "clicks")
                    stats.total_clicks += int(clicks or 0)

        except StoreError as e:
            logger.error("get_system_stats_failed", error=str(e))
            return SystemStats()

        return stats

    async def fix_key_structure(self) -> Optional[RepairReport]:
        """
        Idempotent repair pass over the keyspace.

        Restores what a half-finished multi-step write can leave behind:
        - username claims (hashes holding only "username") left by a
          registration that died before writing the full record
        - complete user hashes missing from the users set
        - missing email:<email> index entries
        - missing profiles (default profile, as on first read)
        - link hashes missing from their owner's user:<userId>:links set

        Returns:
            A report of the changes, None if the store failed
        """
        report = RepairReport()
        try:
            known_users = await self.store.smembers(USERS_KEY)

            for key in await self.store.keys("user:*"):
                # user:<username> hashes only, not user:<userId>:links sets
                if key.count(":") != 1:
                    continue
                username = key.split(":", 1)[1]
                data = await self.store.hgetall(key)
                if data and set(data) == {"username"}:
                    await self.store.delete(key)
                    await self.store.srem(USERS_KEY, username)
                    known_users.discard(username)
                    report.stale_claims_removed += 1
                    continue
                if username not in known_users and user_from_store(data):
                    await self.store.sadd(USERS_KEY, username)
                    known_users.add(username)
                    report.users_reindexed += 1

            for username in sorted(known_users):
                user = user_from_store(await self.store.hgetall(user_key(username)))
                if not user:
                    continue
                report.users_checked += 1

                if user.email and await self.store.set(email_key(user.email), username, nx=True):
                    report.email_indexes_restored += 1

                if not await self.store.exists(profile_key(username)):
                    if await self.profile_service.get_profile(username):
                        report.profiles_created += 1

            for key in await self.store.keys("link:*"):
                # link:<id> hashes only, not link:<id>:clicks logs
                if key.count(":") != 1:
                    continue
                data = await self.store.hgetall(key)
                if not data:
                    continue
                link = link_from_store(data)
                if link and await self.store.sadd(user_links_key(link.user_id), link.id):
                    report.links_reindexed += 1

        except StoreError as e:
            logger.error("fix_key_structure_failed", error=str(e))
            return None

        logger.info("key_structure_repaired", **report.model_dump())
        return report

    async def clear_user_data(self, username: str) -> bool:
        """
        Remove a user and everything hanging off it: links and their
        click logs, profile and view log, sessions, email index and
        users set membership.
        """
        try:
            user = user_from_store(await self.store.hgetall(user_key(username)))
            if not user:
                return False

            link_ids = await self.store.smembers(user_links_key(user.id))
            for link_id in link_ids:
                await self.store.delete(link_key(link_id), link_clicks_key(link_id))
            await self.store.delete(user_links_key(user.id))

            await self.store.delete(profile_key(username), profile_views_key(username))

            for session in await self.store.keys("session:*"):
                if await self.store.get(session) == username:
                    await self.store.delete(session)

            await self.store.delete(user_key(username))
            if user.email:
                await self.store.delete(email_key(user.email))
            await self.store.srem(USERS_KEY, username)

        except StoreError as e:
            logger.error("clear_user_data_failed", username=username, error=str(e))
            return False

        logger.info("user_data_cleared", username=username, links=len(link_ids))
        return True

    async def reset_database(self) -> bool:
        """Drop every key in the store (development only)"""
        try:
            await self.store.flush()
        except StoreError as e:
            logger.error("reset_database_failed", error=str(e))
            return False
        logger.warning("database_reset")
        return True
