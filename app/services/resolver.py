"""Selection, ordering and rendering of HTML blocks for a layout position.

Everything here works on frozen snapshots so results can be cached and shared
between requests without holding on to a database session. Block content is
opaque HTML and is concatenated verbatim.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from app.models.html_block import HtmlBlock
from app.models.scope import StoreScope


@dataclass(frozen=True, slots=True)
class TranslationSnapshot:
    locale: str
    title: str | None = None
    content: str | None = None


@dataclass(frozen=True, slots=True)
class BlockSnapshot:
    id: int
    code: str
    store_id: int | None = None
    is_active: bool = True
    sort_order: int = 0
    deleted_at: datetime | None = None
    translations: tuple[TranslationSnapshot, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(cls, block: HtmlBlock) -> "BlockSnapshot":
        return cls(
            id=block.id,
            code=block.code,
            store_id=block.store_id,
            is_active=block.is_active,
            sort_order=block.sort_order,
            deleted_at=block.deleted_at,
            translations=tuple(
                TranslationSnapshot(locale=item.locale, title=item.title, content=item.content)
                for item in block.translations
            ),
        )

    @property
    def store_scope(self) -> StoreScope:
        return StoreScope(self.store_id)


@dataclass(frozen=True, slots=True)
class ResolvedContent:
    blocks: tuple[BlockSnapshot, ...]
    html: str

    @property
    def has_blocks(self) -> bool:
        return bool(self.blocks)


def is_active(block: BlockSnapshot) -> bool:
    return block.is_active


def is_not_deleted(block: BlockSnapshot) -> bool:
    return block.deleted_at is None


def matches_scope(block: BlockSnapshot, store_id: int | None) -> bool:
    return block.store_scope.applies_to(store_id)


def select_candidates(blocks: Iterable[BlockSnapshot], position: str, store_id: int | None) -> list[BlockSnapshot]:
    return [
        block
        for block in blocks
        if is_active(block) and is_not_deleted(block) and block.code == position and matches_scope(block, store_id)
    ]


def sort_key(block: BlockSnapshot) -> tuple[int, int]:
    return block.sort_order, block.id


def order_blocks(blocks: Iterable[BlockSnapshot]) -> list[BlockSnapshot]:
    return sorted(blocks, key=sort_key)


def translation_for(block: BlockSnapshot, locale: str) -> TranslationSnapshot | None:
    for translation in block.translations:
        if translation.locale == locale:
            return translation
    return None


def render_content(blocks: Sequence[BlockSnapshot], locale: str) -> str:
    parts: list[str] = []
    for block in blocks:
        translation = translation_for(block, locale)
        if translation is not None and translation.content:
            parts.append(translation.content)
    return "".join(parts)


def applicable_blocks(blocks: Iterable[BlockSnapshot], position: str, store_id: int | None) -> tuple[BlockSnapshot, ...]:
    return tuple(order_blocks(select_candidates(blocks, position, store_id)))


def resolve(blocks: Iterable[BlockSnapshot], position: str, store_id: int | None, locale: str) -> ResolvedContent:
    applied = applicable_blocks(blocks, position, store_id)
    return ResolvedContent(blocks=applied, html=render_content(applied, locale))
