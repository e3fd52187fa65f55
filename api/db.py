# api/db.py
"""Export archive storage. SQLite under FG_STATE_DIR unless FG_DB_URL says otherwise."""

from __future__ import annotations

from typing import Dict, Generator, Optional

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from api.config.paths import ensure_runtime_dirs
from api.config.settings import Settings, load_settings
from api.db_models import Base

DB_FILENAME = "fieldgate.sqlite3"

# keyed by URL so a changed FG_DB_URL gets its own engine
_ENGINES: Dict[str, Engine] = {}
_SESSIONS: Dict[str, sessionmaker] = {}


def resolve_db_url(settings: Optional[Settings] = None) -> str:
    settings = settings or load_settings()
    if settings.db_url:
        return settings.db_url
    ensure_runtime_dirs(settings.state_dir)
    return f"sqlite:///{(settings.state_dir / DB_FILENAME).as_posix()}"


def get_engine() -> Engine:
    url = resolve_db_url()
    engine = _ENGINES.get(url)
    if engine is None:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        engine = create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)
        _ENGINES[url] = engine
        _SESSIONS[url] = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine


def init_db() -> None:
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("db_initialised", extra={"dialect": engine.dialect.name})


def dispose_engines() -> None:
    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()
    _SESSIONS.clear()


def get_db() -> Generator[Session, None, None]:
    get_engine()
    db: Session = _SESSIONS[resolve_db_url()]()
    try:
        yield db
    finally:
        db.close()
