from __future__ import annotations
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..evaluation import EvaluationOutcome, SubmissionEvaluator, get_evaluator
from ..models import SubmissionResult
from ..schemas import ApiResponse, EvaluationResult, GradeRequest
from ..settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/submissions", tags=["submissions"])


def outcome_metadata(outcome: EvaluationOutcome, **extra: Any) -> Dict[str, Any]:
	meta: Dict[str, Any] = {"timestamp": outcome.result.created_at, "source": outcome.source, **extra}
	if outcome.source == "llm":
		meta["model"] = settings.anthropic_model
	return meta


def store_outcome(db: Session, outcome: EvaluationOutcome, lesson_title: str) -> None:
	# Storage is best effort; the learner still gets the evaluation
	result = outcome.result
	try:
		db.add(
			SubmissionResult(
				id=result.id,
				submission_id=result.submission_id,
				lesson_title=lesson_title,
				source=outcome.source,
				confidence_score=result.confidence_score,
				is_correct=result.is_correct,
				result_json=result.model_dump_json(by_alias=True, exclude_none=True),
			)
		)
		db.commit()
	except SQLAlchemyError:
		db.rollback()
		logger.exception("Could not store evaluation %s for submission %s", result.id, result.submission_id)


@router.post("/grade", response_model=ApiResponse[EvaluationResult], response_model_exclude_none=True)
async def grade_submission(
	req: GradeRequest,
	evaluator: SubmissionEvaluator = Depends(get_evaluator),
	db: Session = Depends(get_db),
):
	outcome = await evaluator.evaluate(req)
	store_outcome(db, outcome, req.lesson_title)
	return ApiResponse[EvaluationResult](
		data=outcome.result,
		metadata=outcome_metadata(outcome, lessonTitle=req.lesson_title),
	)


@router.get("/{submission_id}", response_model=ApiResponse[EvaluationResult], response_model_exclude_none=True)
def get_submission_result(submission_id: str, db: Session = Depends(get_db)):
	row = db.execute(
		select(SubmissionResult)
		.where(SubmissionResult.submission_id == submission_id)
		.order_by(SubmissionResult.created_at.desc())
		.limit(1)
	).scalar_one_or_none()
	if row is None:
		raise HTTPException(status_code=404, detail="Submission not found")
	return ApiResponse[EvaluationResult](
		data=EvaluationResult.model_validate_json(row.result_json),
		metadata={"source": row.source, "lessonTitle": row.lesson_title},
	)
