from datetime import datetime, timedelta

from codecoach.cleanup import purge_expired, purge_older_than
from codecoach.models import SubmissionResult


def row(id, age_days):
	stamp = datetime.utcnow() - timedelta(days=age_days)
	return SubmissionResult(
		id=id,
		submission_id=f"sub-{id}",
		source="heuristic",
		confidence_score=50,
		is_correct=False,
		result_json="{}",
		created_at=stamp,
		updated_at=stamp,
	)


def test_purge_removes_only_old_rows(session_factory):
	db = session_factory()
	db.add_all([row("old", 10), row("recent", 1)])
	db.commit()

	assert purge_older_than(db, days=7) == 1
	assert [r.id for r in db.query(SubmissionResult).all()] == ["recent"]
	db.close()


def test_scheduled_purge_uses_given_sessions(session_factory):
	db = session_factory()
	db.add_all([row("stale", 30), row("fresh", 0)])
	db.commit()
	db.close()

	assert purge_expired(session_factory, days=7) == 1
	assert purge_expired(session_factory, days=7) == 0
