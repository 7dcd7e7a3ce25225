"""Engine and session factory shared by the API and the batch worker."""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from disc_specs.core.config import settings

_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a request-scoped DB session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create any missing tables. Production schemas are managed by Alembic."""
    from disc_specs.entities.base import Base
    import disc_specs.entities.scrape_job  # noqa: F401
    import disc_specs.entities.technical_spec  # noqa: F401
    import disc_specs.entities.disc_rating  # noqa: F401
    import disc_specs.entities.cached_page  # noqa: F401
    import disc_specs.entities.collection_item  # noqa: F401

    Base.metadata.create_all(engine)
