from dataclasses import dataclass

GLOBAL_SCOPE_KEY = "global"


@dataclass(frozen=True, slots=True)
class StoreScope:
    """Either every store (``store_id is None``) or exactly one store."""

    store_id: int | None = None

    @classmethod
    def global_(cls) -> "StoreScope":
        return cls(None)

    @classmethod
    def for_store(cls, store_id: int) -> "StoreScope":
        return cls(store_id)

    @property
    def is_global(self) -> bool:
        return self.store_id is None

    def applies_to(self, store_id: int | None) -> bool:
        # Scopes are additive: global blocks apply everywhere, store blocks only to their store.
        if self.store_id is None:
            return True
        return store_id is not None and self.store_id == store_id

    @property
    def cache_token(self) -> str:
        return GLOBAL_SCOPE_KEY if self.store_id is None else str(self.store_id)
