from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin
from app.core.config import get_settings
from app.db.session import get_db
from app.models.html_block import HtmlBlock
from app.models.store import Store
from app.services.html_blocks import get_html_block_cache

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    settings = get_settings()
    return {"status": "ok", "version": settings.app_version}


@router.get("/system/info", dependencies=[Depends(get_current_admin)])
def system_info(db: Session = Depends(get_db)):
    settings = get_settings()
    blocks_count = db.scalar(select(func.count()).select_from(HtmlBlock).where(HtmlBlock.deleted_at.is_(None))) or 0
    stores_count = db.scalar(select(func.count()).select_from(Store)) or 0
    cache = get_html_block_cache()
    return {
        "app_name": settings.app_name,
        "app_env": settings.app_env,
        "app_version": settings.app_version,
        "html_blocks": blocks_count,
        "stores": stores_count,
        "cache_ttl_seconds": cache.ttl_seconds,
        "cache_backend": type(cache.backend).__name__,
    }
