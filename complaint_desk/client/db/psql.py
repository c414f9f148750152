import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from complaint_desk.db import session as db_session

logger = logging.getLogger(__name__)


@contextmanager
def session_scope() -> Iterator[Session]:
    """One unit of work: commit when the block finishes, roll back and re-raise if it fails."""
    db = db_session.SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as exc:
        logger.debug("rolling back session after %s", type(exc).__name__)
        db.rollback()
        raise
    finally:
        db.close()
