from __future__ import annotations
from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from .db import Base


class SubmissionResult(Base):
	__tablename__ = "submission_results"
	# One row per evaluated attempt; a submission id may be graded more than once
	id = Column(String(64), primary_key=True)
	submission_id = Column(String(128), index=True, nullable=False)
	lesson_title = Column(String(256), nullable=True)
	source = Column(String(16), nullable=False)  # "llm" or "heuristic"
	confidence_score = Column(Integer, nullable=False)
	is_correct = Column(Boolean, nullable=False)
	result_json = Column(Text, nullable=False)  # camelCase EvaluationResult snapshot
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
