import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.store import Store
from app.models.store_setting import StoreModuleSetting

logger = logging.getLogger(__name__)


class UnknownStoreError(Exception):
    def __init__(self, store_id: int) -> None:
        super().__init__(f"Store {store_id} does not exist")
        self.store_id = store_id


class StoreSettingsService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.settings = get_settings()

    def is_enabled_for_store(self, store_id: int | None) -> bool:
        if store_id is None:
            return self.settings.html_blocks_enabled_by_default
        row = self.db.get(StoreModuleSetting, store_id)
        if row is None:
            return self.settings.html_blocks_enabled_by_default
        return row.is_enabled

    def get(self, store_id: int) -> StoreModuleSetting:
        self._require_store(store_id)
        row = self.db.get(StoreModuleSetting, store_id)
        if row is None:
            return StoreModuleSetting(
                store_id=store_id,
                is_enabled=self.settings.html_blocks_enabled_by_default,
                sort_order=self.settings.html_blocks_default_sort_order,
            )
        return row

    def list_all(self) -> list[StoreModuleSetting]:
        stores = self.db.scalars(select(Store).order_by(Store.id)).all()
        return [self.get(store.id) for store in stores]

    def save(self, store_id: int, *, is_enabled: bool, sort_order: int) -> StoreModuleSetting:
        self._require_store(store_id)
        row = self.db.get(StoreModuleSetting, store_id)
        if row is None:
            row = StoreModuleSetting(store_id=store_id)
        row.is_enabled = is_enabled
        row.sort_order = sort_order
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.info("HTML blocks %s for store %s.", "enabled" if is_enabled else "disabled", store_id)
        return row

    def _require_store(self, store_id: int) -> None:
        if self.db.get(Store, store_id) is None:
            raise UnknownStoreError(store_id)
