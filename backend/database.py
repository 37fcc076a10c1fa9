import time
import logging
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool
from config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(url: str) -> Engine:
    """Engine for the projects database.

    SQLite connections are shared with FastAPI's threadpool, and an in-memory
    SQLite URL is pinned to a single connection so every session sees the
    same projects table.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def wait_for_db(bind: Engine = engine, max_retries: int = 30, delay: float = 2.0):
    """Block until the projects database answers; SQLite files never need to wait."""
    if bind.dialect.name == "sqlite":
        return
    for attempt in range(1, max_retries + 1):
        try:
            with bind.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info(f"Projects database reachable ({bind.dialect.name}).")
            return
        except Exception as e:
            logger.warning(f"Projects DB not ready (attempt {attempt}/{max_retries}): {e}")
            if attempt < max_retries:
                time.sleep(delay)
    raise RuntimeError("Could not connect to the projects database after retries")


def init_projects_schema(bind: Engine = engine) -> bool:
    """Create the projects table if missing. Returns True when it was created."""
    import models  # noqa: F401 — register the projects table
    wait_for_db(bind)
    existed = inspect(bind).has_table("projects")
    Base.metadata.create_all(bind=bind)
    if not existed:
        logger.info("Created projects table.")
    return not existed
