from fastapi import APIRouter, Depends, Query

from app.api.deps import get_html_block_service
from app.schemas.html_blocks import ContentResponse
from app.services.html_blocks import HtmlBlockService

router = APIRouter(prefix="/content", tags=["content"])


@router.get("/{position}", response_model=ContentResponse)
def position_content(
    position: str,
    store_id: int | None = Query(default=None),
    locale: str | None = Query(default=None, min_length=2, max_length=10),
    service: HtmlBlockService = Depends(get_html_block_service),
):
    resolved_locale = locale or service.default_locale
    html = service.get_content(position, store_id, resolved_locale)
    return ContentResponse(
        position=position,
        store_id=store_id,
        locale=resolved_locale,
        html=html,
        has_content=service.is_enabled_for_store(store_id) and service.has_content(position, store_id),
    )
