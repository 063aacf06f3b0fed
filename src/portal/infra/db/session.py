from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.portal.infra.db.models import Base


SessionFactory = Callable[[], Session]


def create_sqlalchemy_session_factory(database_url: str) -> SessionFactory:
    """Create a SQLAlchemy-backed SessionFactory.

    Tables are created on first use; the credential store has a single table
    and no migrations.
    """

    engine = create_engine(database_url, future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, class_=Session)

    def _factory() -> Session:
        return SessionLocal()

    return _factory
