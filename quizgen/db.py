# db.py
import os
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set in .env")

IS_SQLITE = DATABASE_URL.startswith("sqlite")

# FastAPI runs sync handlers in a threadpool; SQLite connections must be shareable.
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    pool_recycle=3600,
    connect_args={"check_same_thread": False} if IS_SQLITE else {},
)

if IS_SQLITE:
    # Quiz -> Upload and Question/Attempt -> Quiz references are only enforced with this on
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db() -> None:
    """Creates the uploads / quizzes / questions / quiz_attempts tables if missing."""
    from quizgen import models  # noqa: F401  (registers the tables on Base)

    Base.metadata.create_all(bind=engine)
    logger.info("Database ready: %s", ", ".join(sorted(Base.metadata.tables)))


@contextmanager
def get_session():
    """One session per request; anything not committed is rolled back on error."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
