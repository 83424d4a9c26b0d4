import logging

from sqlalchemy.orm import Session

from app.models.html_block import HtmlBlock
from app.schemas.html_blocks import HtmlBlockWriteRequest
from app.services.block_store import HtmlBlockRepository
from app.services.html_blocks import HtmlBlockService
from app.services.store_settings import UnknownStoreError

logger = logging.getLogger(__name__)


class BlockNotFoundError(Exception):
    def __init__(self, block_id: int) -> None:
        super().__init__(f"HTML block {block_id} not found")
        self.block_id = block_id


class HtmlBlockAdminService:
    """Block mutations. Every commit is followed by cache invalidation for the
    affected ``(position, store scope)`` keys."""

    def __init__(self, db: Session, block_service: HtmlBlockService) -> None:
        self.db = db
        self.repository = HtmlBlockRepository(db)
        self.block_service = block_service

    def create(self, payload: HtmlBlockWriteRequest) -> HtmlBlock:
        self._require_store(payload.store_id)
        block = HtmlBlock(
            store_id=payload.store_id,
            code=payload.code,
            is_active=payload.is_active,
            sort_order=payload.sort_order,
        )
        self._apply_translations(block, payload)
        self.db.add(block)
        self.db.commit()
        self.db.refresh(block)

        self.block_service.invalidate_block(block)
        logger.info("Created HTML block %s at %s (store=%s).", block.id, block.code, block.store_id)
        return block

    def update(self, block_id: int, payload: HtmlBlockWriteRequest) -> HtmlBlock:
        block = self._get_or_raise(block_id)
        self._require_store(payload.store_id)
        previous = (block.code, block.store_id)

        block.store_id = payload.store_id
        block.code = payload.code
        block.is_active = payload.is_active
        block.sort_order = payload.sort_order
        self._apply_translations(block, payload)
        self.db.commit()
        self.db.refresh(block)

        self.block_service.invalidate(*previous)
        if previous != (block.code, block.store_id):
            self.block_service.invalidate_block(block)
        logger.info("Updated HTML block %s.", block.id)
        return block

    def delete(self, block_id: int) -> None:
        block = self._get_or_raise(block_id)
        block.soft_delete()
        self.db.commit()

        self.block_service.invalidate_block(block)
        logger.info("Soft-deleted HTML block %s.", block.id)

    def restore(self, block_id: int) -> HtmlBlock:
        block = self.repository.get(block_id, include_deleted=True)
        if block is None:
            raise BlockNotFoundError(block_id)
        block.restore()
        self.db.commit()
        self.db.refresh(block)

        self.block_service.invalidate_block(block)
        logger.info("Restored HTML block %s.", block.id)
        return block

    def toggle(self, block_id: int) -> HtmlBlock:
        block = self._get_or_raise(block_id)
        block.is_active = not block.is_active
        self.db.commit()
        self.db.refresh(block)

        self.block_service.invalidate_block(block)
        logger.info("HTML block %s is now %s.", block.id, "active" if block.is_active else "inactive")
        return block

    def _get_or_raise(self, block_id: int) -> HtmlBlock:
        block = self.repository.get(block_id)
        if block is None:
            raise BlockNotFoundError(block_id)
        return block

    def _require_store(self, store_id: int | None) -> None:
        if store_id is not None and not self.repository.store_exists(store_id):
            raise UnknownStoreError(store_id)

    @staticmethod
    def _apply_translations(block: HtmlBlock, payload: HtmlBlockWriteRequest) -> None:
        for locale, translation in payload.translations.items():
            if translation.is_blank:
                continue
            target = block.translate_or_new(locale)
            target.title = translation.title
            target.content = translation.content
