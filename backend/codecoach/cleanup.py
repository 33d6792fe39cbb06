from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import SessionLocal
from .models import SubmissionResult
from .settings import settings

logger = logging.getLogger(__name__)


def purge_older_than(db: Session, days: int = 7) -> int:
	threshold = datetime.utcnow() - timedelta(days=days)
	res = db.execute(delete(SubmissionResult).where(SubmissionResult.updated_at < threshold))
	db.commit()
	return res.rowcount or 0


def purge_expired(session_factory: Callable[[], Session] = SessionLocal, days: Optional[int] = None) -> int:
	"""Scheduled purge using the configured retention; failures are logged, not raised."""
	days = settings.submission_retention_days if days is None else days
	db = session_factory()
	try:
		removed = purge_older_than(db, days)
	except SQLAlchemyError:
		db.rollback()
		logger.exception("Evaluation cleanup failed")
		return 0
	finally:
		db.close()
	if removed:
		logger.info("Purged %d stored evaluations older than %d days", removed, days)
	return removed
