from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import (
    get_current_admin,
    get_html_block_admin_service,
    get_html_block_service,
    get_store_settings_service,
)
from app.core.config import get_settings
from app.db.session import get_db
from app.schemas.html_blocks import (
    HtmlBlockApiItem,
    HtmlBlockListItem,
    HtmlBlockOut,
    HtmlBlockPage,
    HtmlBlockWriteRequest,
    PositionOption,
    StoreSettingOut,
    StoreOut,
    StoreSettingUpdateRequest,
    ToggleResponse,
)
from app.services.block_store import BlockListFilters, HtmlBlockRepository
from app.services.html_block_admin import BlockNotFoundError, HtmlBlockAdminService
from app.services.html_blocks import HtmlBlockService
from app.services.store_settings import StoreSettingsService, UnknownStoreError

router = APIRouter(prefix="/admin/html-blocks", tags=["html-blocks"], dependencies=[Depends(get_current_admin)])
api_router = APIRouter(prefix="/api", tags=["html-blocks"], dependencies=[Depends(get_current_admin)])


def _not_found(exc: BlockNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _unknown_store(exc: UnknownStoreError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"error": "unknown_store", "store_id": exc.store_id},
    )


@router.get("/blocks", response_model=HtmlBlockPage)
def list_blocks(
    position: str | None = Query(default=None, max_length=100),
    store_id: str | None = Query(default=None, pattern=r"^(global|\d+)$"),
    status_value: str | None = Query(default=None, alias="status", pattern=r"^(active|inactive)$"),
    search: str | None = Query(default=None, max_length=255),
    include_deleted: bool = False,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    filters = BlockListFilters(
        position=position,
        store_id=store_id,
        status=status_value,
        search=search,
        include_deleted=include_deleted,
        page=page,
        per_page=per_page,
    )
    result = HtmlBlockRepository(db).list_blocks(filters)
    locale = get_settings().default_locale
    return HtmlBlockPage(
        items=[HtmlBlockListItem.from_block(block, locale) for block in result.items],
        total=result.total,
        page=result.page,
        per_page=result.per_page,
    )


@router.post("/blocks", response_model=HtmlBlockOut, status_code=status.HTTP_201_CREATED)
def create_block(
    payload: HtmlBlockWriteRequest,
    service: HtmlBlockAdminService = Depends(get_html_block_admin_service),
):
    try:
        return service.create(payload)
    except UnknownStoreError as exc:
        raise _unknown_store(exc) from exc


@router.get("/blocks/{block_id}", response_model=HtmlBlockOut)
def get_block(block_id: int, db: Session = Depends(get_db)):
    block = HtmlBlockRepository(db).get(block_id, include_deleted=True)
    if block is None:
        raise _not_found(BlockNotFoundError(block_id))
    return block


@router.put("/blocks/{block_id}", response_model=HtmlBlockOut)
def update_block(
    block_id: int,
    payload: HtmlBlockWriteRequest,
    service: HtmlBlockAdminService = Depends(get_html_block_admin_service),
):
    try:
        return service.update(block_id, payload)
    except BlockNotFoundError as exc:
        raise _not_found(exc) from exc
    except UnknownStoreError as exc:
        raise _unknown_store(exc) from exc


@router.delete("/blocks/{block_id}")
def delete_block(block_id: int, service: HtmlBlockAdminService = Depends(get_html_block_admin_service)):
    try:
        service.delete(block_id)
    except BlockNotFoundError as exc:
        raise _not_found(exc) from exc
    return {"ok": True}


@router.post("/blocks/{block_id}/toggle", response_model=ToggleResponse)
def toggle_block(block_id: int, service: HtmlBlockAdminService = Depends(get_html_block_admin_service)):
    try:
        block = service.toggle(block_id)
    except BlockNotFoundError as exc:
        raise _not_found(exc) from exc
    return ToggleResponse(id=block.id, is_active=block.is_active)


@router.post("/blocks/{block_id}/restore", response_model=HtmlBlockOut)
def restore_block(block_id: int, service: HtmlBlockAdminService = Depends(get_html_block_admin_service)):
    try:
        return service.restore(block_id)
    except BlockNotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/positions", response_model=list[PositionOption])
def list_positions(service: HtmlBlockService = Depends(get_html_block_service)):
    return service.position_options()


@router.get("/stores", response_model=list[StoreOut])
def list_stores(db: Session = Depends(get_db)):
    return HtmlBlockRepository(db).list_stores()


@router.post("/cache/clear")
def clear_cache(service: HtmlBlockService = Depends(get_html_block_service)):
    service.invalidate_all()
    return {"ok": True}


@router.get("/settings", response_model=list[StoreSettingOut])
def list_settings(service: StoreSettingsService = Depends(get_store_settings_service)):
    return service.list_all()


@router.put("/settings", response_model=StoreSettingOut)
def update_settings(
    payload: StoreSettingUpdateRequest,
    service: StoreSettingsService = Depends(get_store_settings_service),
):
    try:
        return service.save(payload.store_id, is_enabled=payload.is_enabled, sort_order=payload.sort_order)
    except UnknownStoreError as exc:
        raise _unknown_store(exc) from exc


@api_router.get("/html-blocks", response_model=list[HtmlBlockApiItem])
def api_list_blocks(
    position: str | None = Query(default=None, max_length=100),
    store_id: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    return HtmlBlockRepository(db).api_list(position=position, store_id=store_id)
