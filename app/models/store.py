from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Store(Base):
    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)

    html_blocks = relationship("HtmlBlock", back_populates="store", cascade="all, delete-orphan")
    html_block_setting = relationship(
        "StoreModuleSetting", back_populates="store", cascade="all, delete-orphan", uselist=False
    )
