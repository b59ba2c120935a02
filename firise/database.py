import os
import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from firise import config

logger = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    """Build an engine with the pool settings that suit the target database."""
    # Only use connect_args if we are using SQLite
    engine_args = {}
    if database_url.startswith("sqlite"):
        engine_args["connect_args"] = {"check_same_thread": False}
    else:
        # Production settings for PostgreSQL
        engine_args.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        })

    try:
        return create_engine(database_url, **engine_args, echo=False)
    except Exception as e:
        logger.error(f"Failed to create engine: {e}")
        raise


def init_db(engine: Engine):
    """Create the data/ directory for a local SQLite file, then create all tables."""
    url = engine.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)

    # Import all models so they register with Base.metadata
    import firise.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully.")


def create_storage(backend: str = None, database_url: str = None, seed: bool = None):
    """Build the storage service the application holds for its whole life."""
    from firise.services.mem_storage import MemStorage
    from firise.services.seed import seed_demo_data

    backend = (backend or config.STORAGE_BACKEND).lower()
    seed = config.SEED_DEMO_DATA if seed is None else seed

    if backend == "memory":
        storage = MemStorage()
    elif backend == "sql":
        from firise.services.sql_storage import SqlStorage
        storage = SqlStorage(database_url or config.DATABASE_URL)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND {backend!r}; expected 'memory' or 'sql'")

    logger.info("Using %s storage", backend)
    if seed:
        seed_demo_data(storage)
    return storage


def get_storage(request: Request):
    """FastAPI dependency — the storage instance attached to the running app."""
    return request.app.state.storage
