"""
Tests for profiles: lazy creation, updates, image uploads and view analytics.
"""

import asyncio

from linkhub_app.models.base import ms_to_date, now_ms
from linkhub_app.models.profile import DEFAULT_CUSTOMIZATION, DEFAULT_THEME
from linkhub_app.services.auth_service import AuthService
from linkhub_app.services.profile_service import DAY_MS, ProfileService
from linkhub_app.store.keys import profile_key, profile_views_key
from linkhub_app.store.strategies import InMemoryKeyValueStore, StoreError


class TestGetProfile:

    def test_first_read_creates_default_profile(self, profile_service, store, alice):
        assert asyncio.run(store.exists(profile_key("alice"))) is False

        profile = asyncio.run(profile_service.get_profile("alice"))

        assert profile.user_id == alice.id
        assert profile.username == "alice"
        assert profile.display_name == "Alice"
        assert profile.bio == ""
        assert profile.theme == DEFAULT_THEME
        assert profile.customization == DEFAULT_CUSTOMIZATION
        assert profile.views == 0
        assert asyncio.run(store.exists(profile_key("alice"))) is True

    def test_second_read_returns_same_profile(self, profile_service, alice):
        first = asyncio.run(profile_service.get_profile("alice"))
        second = asyncio.run(profile_service.get_profile("alice"))

        assert first == second

    def test_unknown_user(self, profile_service, store):
        assert asyncio.run(profile_service.get_profile("ghost")) is None
        assert asyncio.run(store.exists(profile_key("ghost"))) is False

    def test_lazy_create_keeps_fields_already_written(self, profile_service, store, alice):
        # A concurrent writer got there first with a partial profile
        asyncio.run(store.hset(profile_key("alice"), {"theme": "dark"}))

        profile = asyncio.run(profile_service.get_profile("alice"))

        assert profile.theme == "dark"
        assert profile.display_name == "Alice"


class TestUpdateProfile:

    def test_replaces_top_level_fields(self, profile_service, alice):
        updated = asyncio.run(profile_service.update_profile("alice", {"bio": "Hi", "theme": "dark"}))

        assert updated.bio == "Hi"
        assert updated.theme == "dark"
        assert updated.display_name == "Alice"
        assert asyncio.run(profile_service.get_profile("alice")) == updated

    def test_customization_merges_across_updates(self, profile_service, alice):
        asyncio.run(profile_service.update_profile("alice", {"customization": {"textColor": "#fff"}}))
        updated = asyncio.run(profile_service.update_profile(
            "alice", {"customization": {"fontFamily": "Inter", "buttonShape": "pill"}}
        ))

        assert updated.customization["textColor"] == "#fff"
        assert updated.customization["fontFamily"] == "Inter"
        assert updated.customization["buttonShape"] == "pill"
        assert updated.customization["buttonStyle"] == DEFAULT_CUSTOMIZATION["buttonStyle"]

    def test_none_means_not_provided(self, profile_service, alice):
        asyncio.run(profile_service.update_profile("alice", {"bio": "Keep me"}))

        updated = asyncio.run(profile_service.update_profile("alice", {"bio": None, "theme": "gradient-blue"}))

        assert updated.bio == "Keep me"
        assert updated.theme == "gradient-blue"

    def test_syncs_user_record(self, profile_service, auth_service, alice):
        asyncio.run(profile_service.update_profile("alice", {"display_name": "Alice A.", "bio": "Writer"}))

        user = asyncio.run(auth_service.get_user("alice"))
        assert user.display_name == "Alice A."
        assert user.bio == "Writer"

    def test_empty_bio_is_synced(self, profile_service, auth_service, alice):
        asyncio.run(profile_service.update_profile("alice", {"bio": "Writer"}))
        asyncio.run(profile_service.update_profile("alice", {"bio": ""}))

        assert asyncio.run(profile_service.get_profile("alice")).bio == ""
        assert asyncio.run(auth_service.get_user("alice")).bio == ""

    def test_theme_only_update_leaves_user_alone(self, profile_service, auth_service, alice):
        asyncio.run(profile_service.update_profile("alice", {"theme": "retro"}))

        assert asyncio.run(auth_service.get_user("alice")) == alice

    def test_update_keeps_view_count(self, profile_service, alice):
        asyncio.run(profile_service.record_view("alice"))

        asyncio.run(profile_service.update_profile("alice", {"bio": "Hi"}))

        assert asyncio.run(profile_service.get_profile("alice")).views == 1

    def test_unknown_user(self, profile_service):
        assert asyncio.run(profile_service.update_profile("ghost", {"bio": "x"})) is None


class TestProfileImage:

    def test_upload_sets_both_records(self, profile_service, auth_service, blob_storage, alice):
        url = asyncio.run(profile_service.upload_profile_image("alice", b"\xff\xd8first"))

        assert url.startswith("memory://blobs/profiles/alice/profile-")
        assert url.endswith(".jpg")
        assert asyncio.run(profile_service.get_profile("alice")).profile_image == url
        assert asyncio.run(auth_service.get_user("alice")).profile_image == url
        assert list(blob_storage.blobs.values()) == [b"\xff\xd8first"]

    def test_upload_replaces_previous_blob(self, profile_service, blob_storage, store, alice):
        blob_storage.blobs["profiles/alice/old.jpg"] = b"old"
        asyncio.run(profile_service.get_profile("alice"))
        asyncio.run(store.hset(profile_key("alice"), {"profileImage": "memory://blobs/profiles/alice/old.jpg"}))

        url = asyncio.run(profile_service.upload_profile_image("alice", b"new"))

        assert "profiles/alice/old.jpg" not in blob_storage.blobs
        assert list(blob_storage.blobs.values()) == [b"new"]
        assert asyncio.run(profile_service.get_profile("alice")).profile_image == url

    def test_missing_previous_blob_is_ignored(self, profile_service, store, alice):
        asyncio.run(profile_service.get_profile("alice"))
        asyncio.run(store.hset(profile_key("alice"), {"profileImage": "https://elsewhere.example.com/a.jpg"}))

        assert asyncio.run(profile_service.upload_profile_image("alice", b"new")) is not None

    def test_upload_for_unknown_user(self, profile_service, blob_storage):
        assert asyncio.run(profile_service.upload_profile_image("ghost", b"data")) is None
        assert blob_storage.blobs == {}

    def test_upload_without_blob_storage(self, store, alice):
        service = ProfileService(store)
        assert asyncio.run(service.upload_profile_image("alice", b"data")) is None


class TestViews:

    def test_record_view_counts(self, profile_service, store, alice):
        counts = [asyncio.run(profile_service.record_view("alice")) for _ in range(3)]

        assert counts == [1, 2, 3]
        assert asyncio.run(profile_service.get_profile("alice")).views == 3
        assert asyncio.run(store.zcard(profile_views_key("alice"))) >= 1

    def test_record_view_unknown_user(self, profile_service, store):
        assert asyncio.run(profile_service.record_view("ghost")) is None
        assert asyncio.run(store.exists(profile_key("ghost"))) is False

    def test_analytics_window(self, profile_service, store, alice):
        asyncio.run(profile_service.get_profile("alice"))
        recent = now_ms() - DAY_MS
        old = now_ms() - 40 * DAY_MS
        asyncio.run(store.zadd(profile_views_key("alice"), {"recent-1": recent, "recent-2": recent + 1, "old": old}))
        asyncio.run(store.hset(profile_key("alice"), {"views": 3}))

        analytics = asyncio.run(profile_service.get_analytics("alice", days=30))

        assert analytics.views == 3
        assert sum(analytics.views_by_day.values()) == 2
        assert ms_to_date(old) not in analytics.views_by_day
        assert analytics.views_by_day[ms_to_date(recent)] >= 1

    def test_analytics_shorter_window(self, profile_service, store, alice):
        week_ago = now_ms() - 7 * DAY_MS
        asyncio.run(store.zadd(profile_views_key("alice"), {"a": week_ago}))

        assert asyncio.run(profile_service.get_analytics("alice", days=3)).views_by_day == {}
        assert sum(asyncio.run(profile_service.get_analytics("alice", days=10)).views_by_day.values()) == 1

    def test_analytics_unknown_user(self, profile_service):
        analytics = asyncio.run(profile_service.get_analytics("ghost"))

        assert analytics.views == 0
        assert analytics.views_by_day == {}

    def test_analytics_log_failure(self):
        class FailingLog(InMemoryKeyValueStore):
            async def zrangebyscore(self, key, min_score, max_score, withscores=False):
                raise StoreError("timeout")

        failing = FailingLog()
        asyncio.run(AuthService(failing).register("bob@example.com", "bob", "secret123", "Bob"))
        service = ProfileService(failing)
        asyncio.run(service.record_view("bob"))

        analytics = asyncio.run(service.get_analytics("bob"))

        assert analytics.views == 1
        assert analytics.views_by_day == {}
