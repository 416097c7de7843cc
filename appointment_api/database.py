from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from appointment_api.core import config


def _engine_options(url: str) -> dict:
    if url.startswith('sqlite'):
        return {'connect_args': {'check_same_thread': False}}
    return {'pool_pre_ping': True}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    # Models register themselves on Base.metadata when imported.
    from appointment_api.models import appointment, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
