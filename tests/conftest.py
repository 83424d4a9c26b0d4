from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker


@pytest.fixture()
def app_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_file.as_posix()}")
    monkeypatch.setenv("AUTO_CREATE_ADMIN", "true")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_LOGIN", "admin")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", "admin123")
    monkeypatch.setenv("DEFAULT_LOCALE", "en")

    from app.core.config import clear_settings_cache
    from app.db.base import Base
    from app.db.session import get_engine, get_session_factory, reset_engine
    from app.main import create_app
    from app.models.store import Store
    from app.services.cache import reset_cache
    from app.services.html_blocks import reset_html_block_cache

    clear_settings_cache()
    reset_engine()
    reset_cache()
    reset_html_block_cache()
    Base.metadata.create_all(bind=get_engine())

    with get_session_factory()() as db:
        for code in ("main", "outlet"):
            if not db.scalar(select(Store).where(Store.code == code)):
                db.add(Store(code=code))
        db.commit()

    app = create_app()
    with TestClient(app) as client:
        yield client

    Base.metadata.drop_all(bind=get_engine())
    reset_engine()
    reset_cache()
    reset_html_block_cache()


@pytest.fixture()
def db_session():
    from app.db.base import Base
    import app.models  # noqa: F401

    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    session: Session = factory()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def auth_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/auth/login", json={"login": "admin", "password": "admin123"})
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def block_payload(code: str, html: str | None, *, store_id: int | None = None, sort_order: int = 0, **extra) -> dict:
    translations = {"en": {"title": f"{code} block", "content": html}}
    translations.update(extra.pop("translations", {}))
    return {
        "store_id": store_id,
        "code": code,
        "is_active": extra.pop("is_active", True),
        "sort_order": sort_order,
        "translations": translations,
    }
