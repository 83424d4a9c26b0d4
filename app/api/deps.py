import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.admin import Admin
from app.services.block_store import HtmlBlockRepository
from app.services.html_block_admin import HtmlBlockAdminService
from app.services.html_blocks import HtmlBlockService, get_html_block_cache
from app.services.store_settings import StoreSettingsService

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Admin:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authorization token")

    try:
        claims = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    admin_id = claims.get("sub")
    if not admin_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    admin = db.get(Admin, admin_id)
    if not admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")
    return admin


def get_store_settings_service(db: Session = Depends(get_db)) -> StoreSettingsService:
    return StoreSettingsService(db)


def get_html_block_service(
    db: Session = Depends(get_db),
    store_settings: StoreSettingsService = Depends(get_store_settings_service),
) -> HtmlBlockService:
    return HtmlBlockService(
        get_html_block_cache(),
        HtmlBlockRepository(db),
        store_settings,
        default_locale=get_settings().default_locale,
    )


def get_html_block_admin_service(
    db: Session = Depends(get_db),
    block_service: HtmlBlockService = Depends(get_html_block_service),
) -> HtmlBlockAdminService:
    return HtmlBlockAdminService(db, block_service)
