import logging

import fakeredis
import pytest

from app.services.cache import CacheUnavailableError, InMemoryTTLCache, RedisCache
from app.services.html_blocks import HtmlBlockCache, HtmlBlockService
from app.services.resolver import BlockSnapshot, TranslationSnapshot


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _FakeBlockStore:
    """Applies only the position filter so the service's own scoping is exercised."""

    def __init__(self, blocks: list[BlockSnapshot]) -> None:
        self.blocks = list(blocks)
        self.queries: list[tuple[str, int | None]] = []

    def find_active_blocks(self, position, store_id):
        self.queries.append((position, store_id))
        return [block for block in self.blocks if block.code == position]

    def replace(self, block_id: int, **changes) -> None:
        self.blocks = [
            BlockSnapshot(**{**_as_dict(block), **changes}) if block.id == block_id else block for block in self.blocks
        ]


class _StoreGate:
    def __init__(self, disabled: set[int] | None = None) -> None:
        self.disabled = disabled or set()

    def is_enabled_for_store(self, store_id):
        return store_id not in self.disabled


class _BrokenBackend:
    def get(self, key):
        raise CacheUnavailableError("connection refused")

    def set(self, key, value, ttl_seconds):
        raise CacheUnavailableError("connection refused")

    def delete(self, key):
        raise CacheUnavailableError("connection refused")

    def delete_many(self, keys):
        raise CacheUnavailableError("connection refused")

    def incr(self, key):
        raise CacheUnavailableError("connection refused")

    def counter(self, key):
        raise CacheUnavailableError("connection refused")


def _as_dict(block: BlockSnapshot) -> dict:
    return {
        "id": block.id,
        "code": block.code,
        "store_id": block.store_id,
        "is_active": block.is_active,
        "sort_order": block.sort_order,
        "deleted_at": block.deleted_at,
        "translations": block.translations,
    }


def _block(block_id, code, html, *, store_id=None, sort_order=0, locale="en"):
    return BlockSnapshot(
        id=block_id,
        code=code,
        store_id=store_id,
        sort_order=sort_order,
        translations=(TranslationSnapshot(locale=locale, title="admin only", content=html),),
    )


@pytest.fixture()
def clock():
    return _Clock()


@pytest.fixture()
def store():
    return _FakeBlockStore(
        [
            _block(1, "footer_left", "<p>A</p>", sort_order=10),
            _block(2, "footer_left", "<p>B</p>", sort_order=5),
            _block(3, "header_top", "<p>C</p>", store_id=2),
        ]
    )


@pytest.fixture()
def cache(clock):
    return HtmlBlockCache(InMemoryTTLCache(clock=clock), ttl_seconds=3600)


@pytest.fixture()
def service(cache, store):
    return HtmlBlockService(cache, store, _StoreGate(), default_locale="en")


def test_get_content_orders_blocks(service):
    assert service.get_content("footer_left", None, "en") == "<p>B</p><p>A</p>"


def test_store_scoped_content(service):
    assert service.get_content("header_top", 1, "en") == ""
    assert service.get_content("header_top", 2, "en") == "<p>C</p>"


def test_locale_defaults_to_configured_locale(service):
    assert service.get_content("footer_left") == "<p>B</p><p>A</p>"
    assert service.get_content("footer_left", locale="de") == ""


def test_blocks_are_cached_per_position_and_store(service, store):
    service.get_content("footer_left", None, "en")
    service.get_content("footer_left", None, "de")
    service.has_content("footer_left")
    assert store.queries == [("footer_left", None)]

    service.get_content("footer_left", 2, "en")
    assert store.queries == [("footer_left", None), ("footer_left", 2)]


def test_empty_result_is_cached(service, store):
    assert service.get_blocks("nowhere") == ()
    assert service.get_blocks("nowhere") == ()
    assert store.queries == [("nowhere", None)]


def test_stale_until_invalidated(service, store):
    assert service.get_content("footer_left", None, "en") == "<p>B</p><p>A</p>"
    store.replace(2, is_active=False)

    assert service.get_content("footer_left", None, "en") == "<p>B</p><p>A</p>"

    service.invalidate("footer_left", None)
    assert service.get_content("footer_left", None, "en") == "<p>A</p>"


def test_invalidate_block_uses_its_scope(service, store):
    service.get_blocks("header_top", 2)
    store.replace(3, sort_order=1, is_active=False)
    service.invalidate_block(store.blocks[2])
    assert service.get_blocks("header_top", 2) == ()


def test_entries_expire_after_ttl(service, store, clock):
    service.get_content("footer_left", None, "en")
    store.replace(1, translations=(TranslationSnapshot(locale="en", content="<p>A2</p>"),))

    clock.now += 3599
    assert service.get_content("footer_left", None, "en") == "<p>B</p><p>A</p>"

    clock.now += 1
    assert service.get_content("footer_left", None, "en") == "<p>B</p><p>A2</p>"


def test_invalidate_all_reaches_store_scoped_keys(service, store, cache):
    service.get_blocks("footer_left")
    service.get_blocks("header_top", 2)
    service.get_blocks("unregistered_slot", 5)
    assert cache.key_for("header_top", 2) in cache.backend

    service.invalidate_all()
    assert cache.key_for("footer_left") not in cache.backend

    service.get_blocks("footer_left")
    service.get_blocks("header_top", 2)
    service.get_blocks("unregistered_slot", 5)
    assert len(store.queries) == 6


def test_has_content_ignores_locale(service):
    assert service.has_content("footer_left")
    assert service.get_content("footer_left", None, "fr") == ""
    assert not service.has_content("header_top", 1)


def test_disabled_store_renders_nothing(cache, store):
    service = HtmlBlockService(cache, store, _StoreGate(disabled={2}))
    assert service.get_content("header_top", 2, "en") == ""
    assert service.get_content("footer_left", 1, "en") == "<p>B</p><p>A</p>"


def test_cache_keys(cache):
    assert cache.key_for("footer_left") == "html_blocks:footer_left:global"
    assert cache.key_for("footer_left", 3) == "html_blocks:footer_left:3"


def test_position_code_is_normalized(service, store):
    assert service.get_content("  footer_left ", None, "en") == "<p>B</p><p>A</p>"
    assert store.queries == [("footer_left", None)]


def test_cache_outage_falls_through_to_store(store, caplog):
    service = HtmlBlockService(HtmlBlockCache(_BrokenBackend(), ttl_seconds=60), store)

    with caplog.at_level(logging.WARNING, logger="app.services.html_blocks"):
        assert service.get_content("footer_left", None, "en") == "<p>B</p><p>A</p>"
        assert service.get_content("footer_left", None, "en") == "<p>B</p><p>A</p>"
        service.invalidate("footer_left")
        service.invalidate_all()

    assert len(store.queries) == 2
    assert any("cache read failed" in record.getMessage() for record in caplog.records)


def test_storage_errors_propagate(cache):
    class _Unavailable:
        def find_active_blocks(self, position, store_id):
            raise ConnectionError("database down")

    service = HtmlBlockService(cache, _Unavailable())
    with pytest.raises(ConnectionError):
        service.get_content("footer_left")


def test_positions_registry(service):
    positions = service.get_positions()
    assert positions["footer_left"] == "Footer Left Column"
    assert {"value": "custom", "label": "Custom Position"} in service.position_options()


class _InvalidatingBlockStore(_FakeBlockStore):
    """Simulates an admin save committing while a miss is being recomputed."""

    def __init__(self, blocks, on_query) -> None:
        super().__init__(blocks)
        self.on_query = on_query

    def find_active_blocks(self, position, store_id):
        result = super().find_active_blocks(position, store_id)
        if self.on_query is not None:
            on_query, self.on_query = self.on_query, None
            on_query()
        return result


def test_invalidate_during_recompute_discards_stale_write(cache):
    store = _InvalidatingBlockStore([_block(1, "footer_left", "<p>old</p>")], on_query=None)
    service = HtmlBlockService(cache, store)

    def save_new_content():
        store.replace(1, translations=(TranslationSnapshot(locale="en", content="<p>new</p>"),))
        service.invalidate("footer_left")

    store.on_query = save_new_content
    assert service.get_content("footer_left", None, "en") == "<p>old</p>"
    assert cache.key_for("footer_left") not in cache.backend

    assert service.get_content("footer_left", None, "en") == "<p>new</p>"
    assert service.get_content("footer_left", None, "en") == "<p>new</p>"
    assert len(store.queries) == 2


def test_invalidate_all_during_recompute_discards_stale_write(cache):
    store = _InvalidatingBlockStore([_block(3, "header_top", "<p>old</p>", store_id=2)], on_query=None)
    service = HtmlBlockService(cache, store)

    def clear_everything():
        store.replace(3, translations=(TranslationSnapshot(locale="en", content="<p>new</p>"),))
        service.invalidate_all()

    store.on_query = clear_everything
    assert service.get_content("header_top", 2, "en") == "<p>old</p>"
    assert service.get_content("header_top", 2, "en") == "<p>new</p>"


def test_invalidation_is_shared_between_workers(clock, store):
    backend = InMemoryTTLCache(clock=clock)
    first = HtmlBlockService(HtmlBlockCache(backend, ttl_seconds=3600), store)
    second = HtmlBlockService(HtmlBlockCache(backend, ttl_seconds=3600), store)

    assert first.get_content("header_top", 2, "en") == "<p>C</p>"
    assert second.get_content("header_top", 2, "en") == "<p>C</p>"
    assert len(store.queries) == 1

    store.replace(3, translations=(TranslationSnapshot(locale="en", content="<p>C2</p>"),))
    second.invalidate("header_top", 2)
    assert first.get_content("header_top", 2, "en") == "<p>C2</p>"

    store.replace(3, translations=(TranslationSnapshot(locale="en", content="<p>C3</p>"),))
    second.invalidate_all()
    assert first.get_content("header_top", 2, "en") == "<p>C3</p>"


def test_redis_backed_workers_share_invalidation():
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer())
    store = _InvalidatingBlockStore([_block(1, "footer_left", "<p>old</p>")], on_query=None)
    first = HtmlBlockService(HtmlBlockCache(RedisCache(client), ttl_seconds=60), store)
    second = HtmlBlockService(HtmlBlockCache(RedisCache(client), ttl_seconds=60), store)

    def save_from_other_worker():
        store.replace(1, translations=(TranslationSnapshot(locale="en", content="<p>new</p>"),))
        second.invalidate("footer_left")

    store.on_query = save_from_other_worker
    assert first.get_content("footer_left", None, "en") == "<p>old</p>"
    assert second.get_content("footer_left", None, "en") == "<p>new</p>"
    assert first.get_content("footer_left", None, "en") == "<p>new</p>"
    assert len(store.queries) == 2
