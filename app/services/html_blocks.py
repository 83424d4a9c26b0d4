import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from app.core.config import get_settings
from app.core.positions import POSITIONS, normalize_position
from app.models.html_block import HtmlBlock
from app.models.scope import StoreScope
from app.services.cache import CacheBackend, CacheUnavailableError, get_cache
from app.services.resolver import BlockSnapshot, applicable_blocks, render_content

logger = logging.getLogger(__name__)


class BlockSource(Protocol):
    def find_active_blocks(self, position: str, store_id: int | None) -> Sequence[BlockSnapshot]: ...


class StoreGate(Protocol):
    def is_enabled_for_store(self, store_id: int | None) -> bool: ...


@dataclass(frozen=True, slots=True)
class CacheToken:
    """Invalidation state observed before a miss was recomputed."""

    key: str
    epoch: int
    generation: int


class HtmlBlockCache:
    """Cache of ordered candidate blocks keyed by position and store scope.

    Every entry is stored with the bulk-invalidation epoch and the per-key
    generation it was computed under. ``invalidate`` bumps the generation and
    ``invalidate_all`` bumps the epoch, both in the backend, so an entry from
    an older epoch or generation is a miss in every process sharing it.
    """

    def __init__(self, backend: CacheBackend, ttl_seconds: int, prefix: str = "html_blocks") -> None:
        self.backend = backend
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def key_for(self, position: str, store_id: int | None = None) -> str:
        return f"{self.prefix}:{position}:{StoreScope(store_id).cache_token}"

    @property
    def epoch_key(self) -> str:
        return f"{self.prefix}:epoch"

    @staticmethod
    def generation_key(key: str) -> str:
        return f"{key}:generation"

    def get(self, position: str, store_id: int | None) -> tuple[tuple[BlockSnapshot, ...] | None, CacheToken | None]:
        key = self.key_for(position, store_id)
        try:
            token = self._observe(key)
            entry = self.backend.get(key)
        except CacheUnavailableError as exc:
            logger.warning("HTML block cache read failed for %s, resolving directly: %s", key, exc)
            return None, None
        if entry is None:
            return None, token
        epoch, generation, blocks = entry
        if (epoch, generation) != (token.epoch, token.generation):
            return None, token
        return blocks, token

    def put(self, token: CacheToken | None, blocks: tuple[BlockSnapshot, ...]) -> None:
        if token is None:
            return
        try:
            self.backend.set(token.key, (token.epoch, token.generation, blocks), self.ttl_seconds)
            # An invalidation that landed while the blocks were being loaded wins.
            if self._observe(token.key) != token:
                self.backend.delete(token.key)
                logger.debug("Dropped HTML block cache entry %s invalidated during recompute.", token.key)
        except CacheUnavailableError as exc:
            logger.warning("HTML block cache write failed for %s: %s", token.key, exc)

    def invalidate(self, position: str, store_id: int | None = None) -> None:
        key = self.key_for(position, store_id)
        try:
            self.backend.incr(self.generation_key(key))
            self.backend.delete(key)
        except CacheUnavailableError as exc:
            logger.error("HTML block cache invalidation failed for %s: %s", key, exc)
            return
        logger.debug("Invalidated HTML block cache key %s.", key)

    def invalidate_all(self, positions: Iterable[str]) -> None:
        try:
            epoch = self.backend.incr(self.epoch_key)
            self.backend.delete_many(sorted(self.key_for(position) for position in positions))
        except CacheUnavailableError as exc:
            logger.error("HTML block cache bulk invalidation failed: %s", exc)
            return
        logger.info("Invalidated all HTML block cache entries (epoch %d).", epoch)

    def _observe(self, key: str) -> CacheToken:
        return CacheToken(
            key=key,
            epoch=self.backend.counter(self.epoch_key),
            generation=self.backend.counter(self.generation_key(key)),
        )


class HtmlBlockService:
    def __init__(
        self,
        cache: HtmlBlockCache,
        blocks: BlockSource,
        store_gate: StoreGate | None = None,
        *,
        default_locale: str = "en",
        positions: Mapping[str, str] = POSITIONS,
    ) -> None:
        self.cache = cache
        self.blocks = blocks
        self.store_gate = store_gate
        self.default_locale = default_locale
        self.positions = positions

    def get_content(self, position: str, store_id: int | None = None, locale: str | None = None) -> str:
        if not self.is_enabled_for_store(store_id):
            return ""
        return render_content(self.get_blocks(position, store_id), locale or self.default_locale)

    def get_blocks(self, position: str, store_id: int | None = None) -> tuple[BlockSnapshot, ...]:
        position = normalize_position(position)
        cached, token = self.cache.get(position, store_id)
        if cached is not None:
            return cached

        resolved = applicable_blocks(self.blocks.find_active_blocks(position, store_id), position, store_id)
        self.cache.put(token, resolved)
        return resolved

    def has_content(self, position: str, store_id: int | None = None) -> bool:
        return bool(self.get_blocks(position, store_id))

    def is_enabled_for_store(self, store_id: int | None) -> bool:
        if self.store_gate is None:
            return True
        return self.store_gate.is_enabled_for_store(store_id)

    def get_positions(self) -> dict[str, str]:
        return dict(self.positions)

    def position_options(self) -> list[dict[str, str]]:
        return [{"value": value, "label": label} for value, label in self.positions.items()]

    def invalidate(self, position: str, store_id: int | None = None) -> None:
        self.cache.invalidate(normalize_position(position), store_id)

    def invalidate_block(self, block: BlockSnapshot | HtmlBlock) -> None:
        self.invalidate(block.code, block.store_scope.store_id)

    def invalidate_all(self) -> None:
        self.cache.invalidate_all(self.positions.keys())


_html_block_cache: HtmlBlockCache | None = None
_html_block_cache_lock = threading.Lock()


def get_html_block_cache() -> HtmlBlockCache:
    global _html_block_cache
    with _html_block_cache_lock:
        if _html_block_cache is None:
            settings = get_settings()
            _html_block_cache = HtmlBlockCache(
                get_cache(),
                ttl_seconds=settings.html_blocks_cache_ttl_seconds,
                prefix=settings.html_blocks_cache_prefix,
            )
        return _html_block_cache


def reset_html_block_cache() -> None:
    global _html_block_cache
    with _html_block_cache_lock:
        _html_block_cache = None
