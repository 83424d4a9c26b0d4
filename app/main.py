import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from app.api.router import api_router
from app.core.config import get_settings
from app.core.security import hash_password
from app.db.session import get_session_factory
from app.models.admin import Admin

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if settings.auto_create_admin:
            session_factory = get_session_factory()
            with session_factory() as db:
                existing = db.scalar(select(Admin).where(Admin.login == settings.bootstrap_admin_login))
                if not existing:
                    db.add(
                        Admin(
                            login=settings.bootstrap_admin_login,
                            password_hash=hash_password(settings.bootstrap_admin_password),
                            role="admin",
                        )
                    )
                    db.commit()
                    logger.info("Bootstrap admin %s created.", settings.bootstrap_admin_login)
        yield

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()
