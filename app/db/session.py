from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.core.config import settings


def engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    # Bound how long a booking waits on another request's room row lock
    return {
        "pool_pre_ping": True,
        "connect_args": {"options": f"-c lock_timeout={settings.DB_LOCK_TIMEOUT_MS}"},
    }


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()
