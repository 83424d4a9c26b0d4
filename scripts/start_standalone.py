import os
import subprocess
import sys
from pathlib import Path

from sqlalchemy.engine import make_url


def _env_default(name: str, value: str) -> None:
    current = os.environ.get(name)
    if current is None or current.strip() == "":
        os.environ[name] = value


def _prepare_environment() -> None:
    _env_default("APP_PORT", "8000")
    _env_default("DATABASE_URL", "sqlite+pysqlite:////data/html_blocks.db")
    _env_default("AUTO_CREATE_ADMIN", "true")
    _env_default("BOOTSTRAP_ADMIN_LOGIN", "admin")
    _env_default("BOOTSTRAP_ADMIN_PASSWORD", "admin123")
    _env_default("SEED_DEMO_DATA", "false")


def _ensure_database_dir() -> None:
    try:
        parsed_url = make_url(os.environ["DATABASE_URL"])
    except Exception:
        return

    if not parsed_url.drivername.startswith("sqlite"):
        return

    db_path = parsed_url.database
    if not db_path or db_path == ":memory:":
        return

    Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def _run(cmd: list[str]) -> None:
    print(">", " ".join(cmd), flush=True)
    subprocess.run(cmd, check=True)


def main() -> None:
    _prepare_environment()
    _ensure_database_dir()

    print("Starting standalone HTML blocks service with:", flush=True)
    print(f"  DATABASE_URL={os.environ['DATABASE_URL']}", flush=True)

    _run([sys.executable, "-m", "alembic", "upgrade", "head"])
    _run(
        [
            sys.executable,
            "scripts/seed_admin.py",
            "--login",
            os.environ["BOOTSTRAP_ADMIN_LOGIN"],
            "--password",
            os.environ["BOOTSTRAP_ADMIN_PASSWORD"],
        ]
    )
    if os.environ["SEED_DEMO_DATA"].strip().lower() in {"1", "true", "yes", "on"}:
        _run([sys.executable, "scripts/seed_demo_data.py"])

    os.execvp(
        "uvicorn",
        ["uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", os.environ["APP_PORT"]],
    )


if __name__ == "__main__":
    main()
