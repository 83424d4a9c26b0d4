from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.html_block import HtmlBlock


class TranslationIn(BaseModel):
    title: str | None = Field(default=None, max_length=255)
    content: str | None = None

    @property
    def is_blank(self) -> bool:
        return not self.title and not self.content


class HtmlBlockWriteRequest(BaseModel):
    store_id: int | None = None
    code: str = Field(..., min_length=1, max_length=100)
    is_active: bool = True
    sort_order: int = Field(default=0, ge=0)
    translations: dict[str, TranslationIn]

    @field_validator("code")
    @classmethod
    def strip_code(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("code must not be blank")
        return value

    @field_validator("translations")
    @classmethod
    def check_locales(cls, value: dict[str, TranslationIn]) -> dict[str, TranslationIn]:
        for locale in value:
            if not 2 <= len(locale) <= 10:
                raise ValueError(f"invalid locale code: {locale!r}")
        return value


class TranslationOut(BaseModel):
    locale: str
    title: str | None
    content: str | None

    model_config = {"from_attributes": True}


class HtmlBlockOut(BaseModel):
    id: int
    store_id: int | None
    code: str
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None
    translations: list[TranslationOut]

    model_config = {"from_attributes": True}


class HtmlBlockListItem(BaseModel):
    id: int
    store_id: int | None
    code: str
    is_active: bool
    sort_order: int
    title: str | None
    deleted_at: datetime | None

    @classmethod
    def from_block(cls, block: HtmlBlock, locale: str) -> "HtmlBlockListItem":
        translation = block.translation_for(locale)
        if translation is None and block.translations:
            translation = block.translations[0]
        return cls(
            id=block.id,
            store_id=block.store_id,
            code=block.code,
            is_active=block.is_active,
            sort_order=block.sort_order,
            title=translation.title if translation else None,
            deleted_at=block.deleted_at,
        )


class HtmlBlockPage(BaseModel):
    items: list[HtmlBlockListItem]
    total: int
    page: int
    per_page: int


class HtmlBlockApiItem(BaseModel):
    id: int
    store_id: int | None
    code: str
    is_active: bool

    model_config = {"from_attributes": True}


class StoreOut(BaseModel):
    id: int
    code: str

    model_config = {"from_attributes": True}


class PositionOption(BaseModel):
    value: str
    label: str


class ToggleResponse(BaseModel):
    id: int
    is_active: bool


class ContentResponse(BaseModel):
    position: str
    store_id: int | None
    locale: str
    html: str
    has_content: bool


class StoreSettingOut(BaseModel):
    store_id: int
    is_enabled: bool
    sort_order: int

    model_config = {"from_attributes": True}


class StoreSettingUpdateRequest(BaseModel):
    store_id: int
    is_enabled: bool = True
    sort_order: int = Field(default=0, ge=0)
