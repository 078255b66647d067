import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from . import config
from .errors import AgriLoopError, TransientStoreError

logger = logging.getLogger(__name__)

DATABASE_URL = config.DATABASE_URL

engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {})
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db(bind=None):
    # Create tables if they don't exist.
    from . import models  # noqa: F401  (register tables on Base.metadata)
    Base.metadata.create_all(bind=bind or engine)


def drop_db(bind=None):
    from . import models  # noqa: F401
    Base.metadata.drop_all(bind=bind or engine)


@contextmanager
def atomic(db: Session):
    """Run a unit of work: commit on success, roll back on any exception.

    Domain errors pass through unchanged; driver/ORM failures surface as
    TransientStoreError after the rollback.
    """
    try:
        yield db
        db.commit()
    except AgriLoopError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Store operation failed, rolled back")
        raise TransientStoreError("Database error. Please try again.") from e
    except Exception:
        db.rollback()
        raise
