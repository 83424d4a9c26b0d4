from dataclasses import dataclass

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session, selectinload

from app.models.html_block import HtmlBlock
from app.models.html_block_translation import HtmlBlockTranslation
from app.models.scope import GLOBAL_SCOPE_KEY
from app.models.store import Store
from app.services.resolver import BlockSnapshot


@dataclass(slots=True)
class BlockListFilters:
    position: str | None = None
    store_id: str | None = None  # store id, or "global" for unscoped blocks only
    status: str | None = None  # active | inactive
    search: str | None = None
    include_deleted: bool = False
    page: int = 1
    per_page: int = 20


@dataclass(slots=True)
class BlockPage:
    items: list[HtmlBlock]
    total: int
    page: int
    per_page: int


def scope_filter(store_id: int | None):
    if store_id is None:
        return HtmlBlock.store_id.is_(None)
    return or_(HtmlBlock.store_id.is_(None), HtmlBlock.store_id == store_id)


class HtmlBlockRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_active_blocks(self, position: str, store_id: int | None) -> list[BlockSnapshot]:
        stmt = (
            select(HtmlBlock)
            .options(selectinload(HtmlBlock.translations))
            .where(
                HtmlBlock.code == position,
                HtmlBlock.is_active.is_(True),
                HtmlBlock.deleted_at.is_(None),
                scope_filter(store_id),
            )
            .order_by(HtmlBlock.sort_order, HtmlBlock.id)
        )
        return [BlockSnapshot.from_model(block) for block in self.db.scalars(stmt).all()]

    def get(self, block_id: int, *, include_deleted: bool = False) -> HtmlBlock | None:
        stmt = select(HtmlBlock).options(selectinload(HtmlBlock.translations)).where(HtmlBlock.id == block_id)
        if not include_deleted:
            stmt = stmt.where(HtmlBlock.deleted_at.is_(None))
        return self.db.scalar(stmt)

    def store_exists(self, store_id: int) -> bool:
        return self.db.get(Store, store_id) is not None

    def list_stores(self) -> list[Store]:
        return list(self.db.scalars(select(Store).order_by(Store.id)).all())

    def list_blocks(self, filters: BlockListFilters) -> BlockPage:
        stmt = self._filtered(filters)
        total = self.db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
        offset = (filters.page - 1) * filters.per_page
        rows = self.db.scalars(
            stmt.options(selectinload(HtmlBlock.translations))
            .order_by(HtmlBlock.sort_order, HtmlBlock.code, HtmlBlock.id)
            .offset(offset)
            .limit(filters.per_page)
        ).all()
        return BlockPage(items=list(rows), total=total, page=filters.page, per_page=filters.per_page)

    def api_list(self, position: str | None = None, store_id: int | None = None) -> list[HtmlBlock]:
        stmt = select(HtmlBlock).where(HtmlBlock.deleted_at.is_(None))
        if position is not None:
            stmt = stmt.where(HtmlBlock.code == position)
        if store_id is not None:
            stmt = stmt.where(scope_filter(store_id))
        return list(self.db.scalars(stmt.order_by(HtmlBlock.code, HtmlBlock.sort_order, HtmlBlock.id)).all())

    def _filtered(self, filters: BlockListFilters) -> Select:
        stmt = select(HtmlBlock)
        if not filters.include_deleted:
            stmt = stmt.where(HtmlBlock.deleted_at.is_(None))
        if filters.position:
            stmt = stmt.where(HtmlBlock.code == filters.position)
        if filters.store_id:
            if filters.store_id == GLOBAL_SCOPE_KEY:
                stmt = stmt.where(HtmlBlock.store_id.is_(None))
            else:
                stmt = stmt.where(HtmlBlock.store_id == int(filters.store_id))
        if filters.status:
            stmt = stmt.where(HtmlBlock.is_active == (filters.status == "active"))
        if filters.search:
            pattern = f"%{filters.search}%"
            title_match = select(HtmlBlockTranslation.html_block_id).where(HtmlBlockTranslation.title.ilike(pattern))
            stmt = stmt.where(or_(HtmlBlock.id.in_(title_match), HtmlBlock.code.ilike(pattern)))
        return stmt
