from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.common import SoftDeleteMixin, TimestampMixin
from app.models.html_block_translation import HtmlBlockTranslation
from app.models.scope import StoreScope


class HtmlBlock(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "html_blocks"
    __table_args__ = (Index("ix_html_blocks_store_code_active", "store_id", "code", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=True, index=True
    )
    code: Mapped[str] = mapped_column(String(100), nullable=False, index=True)  # position code
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    store = relationship("Store", back_populates="html_blocks")
    translations: Mapped[list[HtmlBlockTranslation]] = relationship(
        back_populates="block", cascade="all, delete-orphan", order_by="HtmlBlockTranslation.locale"
    )

    @property
    def store_scope(self) -> StoreScope:
        return StoreScope(self.store_id)

    def translation_for(self, locale: str) -> HtmlBlockTranslation | None:
        for translation in self.translations:
            if translation.locale == locale:
                return translation
        return None

    def translate_or_new(self, locale: str) -> HtmlBlockTranslation:
        translation = self.translation_for(locale)
        if translation is None:
            translation = HtmlBlockTranslation(locale=locale)
            self.translations.append(translation)
        return translation
