"""
Tests for the link store: ordering, updates, deletes and click tracking.
"""

import asyncio

from linkhub_app.services.link_service import LinkService
from linkhub_app.store.keys import link_clicks_key, link_key, user_links_key
from linkhub_app.store.strategies import InMemoryKeyValueStore, StoreError


def create_links(link_service, user_id, count):
    return [
        asyncio.run(link_service.create_link(user_id, title=f"Link {i}", url=f"https://example.com/{i}", position=i))
        for i in range(count)
    ]


class TestCreateAndRead:

    def test_create_link_defaults(self, link_service):
        link = asyncio.run(link_service.create_link("user_1"))

        assert link.id.startswith("link_")
        assert link.title == "New Link"
        assert link.url == ""
        assert link.type == "website"
        assert link.is_public is True
        assert link.position == 0
        assert link.clicks == 0
        assert link.created_at == link.updated_at

    def test_created_link_is_indexed(self, link_service, store):
        link = asyncio.run(link_service.create_link("user_1", title="Blog", url="https://blog.example.com"))

        assert link.id in asyncio.run(store.smembers(user_links_key("user_1")))
        assert asyncio.run(link_service.get_link(link.id)) == link

    def test_ids_unique_within_same_millisecond(self, link_service):
        links = create_links(link_service, "user_1", 20)
        assert len({link.id for link in links}) == 20

    def test_links_sorted_by_position(self, link_service):
        for position, title in [(2, "c"), (0, "a"), (1, "b")]:
            asyncio.run(link_service.create_link("user_1", title=title, url="https://x.io", position=position))

        links = asyncio.run(link_service.get_links_by_user("user_1"))
        assert [link.title for link in links] == ["a", "b", "c"]

    def test_position_ties_break_by_id(self, link_service):
        links = create_links(link_service, "user_1", 3)
        for link in links:
            asyncio.run(link_service.update_link(link.id, {"position": 0}))

        ordered = asyncio.run(link_service.get_links_by_user("user_1"))
        assert [link.id for link in ordered] == sorted(link.id for link in links)

    def test_no_links(self, link_service):
        assert asyncio.run(link_service.get_links_by_user("user_nobody")) == []


class TestUpdate:

    def test_partial_update_merges(self, link_service):
        link = asyncio.run(link_service.create_link("user_1", title="Old", url="https://old.io", type="youtube"))

        updated = asyncio.run(link_service.update_link(link.id, {"title": "New"}))

        assert updated.title == "New"
        assert updated.url == "https://old.io"
        assert updated.type == "youtube"
        assert updated.updated_at >= link.updated_at
        assert asyncio.run(link_service.get_link(link.id)) == updated

    def test_update_ignores_immutable_fields(self, link_service):
        link = asyncio.run(link_service.create_link("user_1"))

        updated = asyncio.run(link_service.update_link(link.id, {"user_id": "user_2", "clicks": 99}))

        assert updated.user_id == "user_1"
        assert updated.clicks == 0

    def test_update_keeps_concurrent_clicks(self, link_service):
        link = asyncio.run(link_service.create_link("user_1"))
        asyncio.run(link_service.record_click(link.id))

        asyncio.run(link_service.update_link(link.id, {"title": "Renamed"}))

        assert asyncio.run(link_service.get_link(link.id)).clicks == 1

    def test_update_missing_link(self, link_service):
        assert asyncio.run(link_service.update_link("link_missing", {"title": "x"})) is None


class TestDelete:

    def test_delete_removes_link(self, link_service, store):
        keep, gone = create_links(link_service, "user_1", 2)
        asyncio.run(link_service.record_click(gone.id))

        assert asyncio.run(link_service.delete_link(gone.id, "user_1")) is True

        remaining = asyncio.run(link_service.get_links_by_user("user_1"))
        assert [link.id for link in remaining] == [keep.id]
        assert asyncio.run(link_service.update_link(gone.id, {"title": "zombie"})) is None
        assert asyncio.run(store.exists(link_clicks_key(gone.id))) is False

    def test_delete_missing_link_still_true(self, link_service):
        assert asyncio.run(link_service.delete_link("link_missing", "user_1")) is True

    def test_delete_store_failure(self):
        class FailingDeletes(InMemoryKeyValueStore):
            async def srem(self, key, *members):
                raise StoreError("timeout")

        service = LinkService(FailingDeletes())
        assert asyncio.run(service.delete_link("link_1", "user_1")) is False


class TestClicks:

    def test_five_clicks(self, link_service, store):
        link = asyncio.run(link_service.create_link("user_1"))

        counts = [asyncio.run(link_service.record_click(link.id)) for _ in range(5)]

        assert counts == [1, 2, 3, 4, 5]
        assert asyncio.run(link_service.get_link(link.id)).clicks == 5
        # Same-millisecond clicks share one log entry
        assert 1 <= asyncio.run(store.zcard(link_clicks_key(link.id))) <= 5

    def test_click_on_missing_link(self, link_service, store):
        assert asyncio.run(link_service.record_click("link_missing")) is None
        assert asyncio.run(store.exists(link_key("link_missing"))) is False

    def test_click_log_failure_keeps_count(self):
        class FailingLog(InMemoryKeyValueStore):
            async def zadd(self, key, mapping):
                raise StoreError("timeout")

        service = LinkService(FailingLog())
        link = asyncio.run(service.create_link("user_1"))

        assert asyncio.run(service.record_click(link.id)) == 1


class TestPublicLinksAndReordering:

    def test_public_links_only(self, link_service, alice):
        for i, is_public in enumerate([True, False, True, False, False]):
            asyncio.run(link_service.create_link(alice.id, title=f"L{i}", url="https://x.io", is_public=is_public, position=i))

        public = asyncio.run(link_service.get_public_links_by_username("alice"))

        assert [link.title for link in public] == ["L0", "L2"]
        assert all(link.is_public is True for link in public)

    def test_public_links_unknown_user(self, link_service):
        assert asyncio.run(link_service.get_public_links_by_username("ghost")) == []

    def test_update_positions_applies_requested_order(self, link_service):
        links = create_links(link_service, "user_1", 4)
        requested = [links[2], links[0], links[3], links[1]]

        ok = asyncio.run(link_service.update_positions(
            (link.id, position) for position, link in enumerate(requested)
        ))

        assert ok is True
        ordered = asyncio.run(link_service.get_links_by_user("user_1"))
        assert [link.id for link in ordered] == [link.id for link in requested]
        assert [link.position for link in ordered] == [0, 1, 2, 3]

    def test_update_positions_reports_missing_links(self, link_service):
        links = create_links(link_service, "user_1", 2)

        ok = asyncio.run(link_service.update_positions([(links[1].id, 0), ("link_missing", 1), (links[0].id, 2)]))

        assert ok is False
        ordered = asyncio.run(link_service.get_links_by_user("user_1"))
        assert [link.id for link in ordered] == [links[1].id, links[0].id]
