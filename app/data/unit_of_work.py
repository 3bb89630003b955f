# app/data/unit_of_work.py
from contextlib import contextmanager

from sqlalchemy.orm import Session

from app.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def transaction(db: Session):
    """
    Jedna jednostka pracy: wszystko co repo zrobilo flush() w bloku
    jest commitowane razem albo w calosci wycofane.
    """
    try:
        yield db
        db.commit()
    except Exception:
        logger.debug("Transaction rolled back")
        db.rollback()
        raise
