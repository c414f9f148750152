import os
from pathlib import Path
from typing import Any, Union

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv(Path(__file__).resolve().parents[2] / ".env")


def _build_database_url() -> Union[str, URL]:
    """DATABASE_URL wins; otherwise the DB_* parts describe a PostgreSQL server."""
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit
    return URL.create(
        "postgresql+psycopg2",
        username=os.getenv("DB_USER", "user"),
        password=os.getenv("DB_PWD", "pass"),
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "5432")),
        database=os.getenv("DB_NAME", "complaints"),
    )


def _engine_options(url: Union[str, URL]) -> dict[str, Any]:
    options: dict[str, Any] = {"future": True, "echo": os.getenv("DB_ECHO") == "1"}
    # Pre-ping only for networked databases.
    if make_url(url).get_backend_name() != "sqlite":
        options["pool_pre_ping"] = True
    return options


DATABASE_URL = _build_database_url()

engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()
