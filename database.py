from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(url: str = "sqlite://"):
    """Return an engine for ``url``.

    An in-memory SQLite database only lives as long as its connection, so it
    gets a single shared connection (StaticPool) for the process lifetime.
    """
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url:
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)
    logger.info("Database engine created url=%s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine) -> None:
    # create the tables (no-op if they already exist)
    import models  # noqa: F401  registers Task on Base.metadata

    Base.metadata.create_all(bind=engine)
