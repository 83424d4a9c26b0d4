from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class HtmlBlockTranslation(Base):
    __tablename__ = "html_block_translations"
    __table_args__ = (UniqueConstraint("html_block_id", "locale", name="uq_html_block_translations_block_locale"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    html_block_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("html_blocks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    locale: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)  # admin reference only
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    block = relationship("HtmlBlock", back_populates="translations")
