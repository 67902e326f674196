from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from typing import Generator
import os

# DATABASE_URL defaults to a local SQLite file at ./data.db (relative to the process working directory).
# Point it at Postgres/MySQL for staging and production.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data.db")

# SQLite (dev/tests) needs cross-thread access for the TestClient and the threadpool FastAPI runs sync routes on.
# Server databases get pre-ping and periodic recycling so idle connections dropped by the server are replaced.
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        pool_recycle=280,
        pool_size=10,
        max_overflow=20,
    )

# One session per request; transactions are committed explicitly by the handlers
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declarative base shared by every ORM model in app.models
Base = declarative_base()


def is_sqlite() -> bool:
    return DATABASE_URL.startswith("sqlite")


def get_db() -> Generator:
    """
    FastAPI dependency.

    Yields a database session for the lifetime of the request and closes it
    afterwards, even when the handler raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
