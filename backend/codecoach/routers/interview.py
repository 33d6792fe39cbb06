from __future__ import annotations
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Form
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from ..claude_client import ClaudeAPIError, ClientFactory, complete, get_claude_factory
from ..db import get_db
from ..evaluation import SubmissionEvaluator, get_evaluator
from ..heuristics import fallback_code_evaluation, fallback_interview_feedback, generate_heuristic_evaluation
from ..keystrokes import KeystrokeEvent, analyze_keystrokes
from ..lessons import find_lesson_by_title, get_lesson
from ..llm_json import extract_json_object
from ..prompts import (
	CODE_EVALUATION_SYSTEM,
	INTERVIEW_FEEDBACK_SYSTEM,
	build_code_evaluation_prompt,
	build_interview_feedback_prompt,
)
from ..schemas import (
	ApiResponse,
	BehaviorMetrics,
	CodeEvaluateRequest,
	CodeEvaluation,
	EvaluationResult,
	GradeRequest,
	InterviewFeedback,
	InterviewFeedbackPayload,
	InterviewFeedbackRequest,
)
from ..settings import settings
from .submissions import outcome_metadata, store_outcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview", tags=["interview"])

# Gap that counts as a "long pause" in interview behaviour metrics
INTERVIEW_PAUSE_MS = 3000

_keystroke_list = TypeAdapter(List[KeystrokeEvent])


def _parse_keystrokes(raw: Optional[str]) -> List[KeystrokeEvent]:
	if not raw:
		return []
	try:
		return _keystroke_list.validate_json(raw)
	except ValidationError as e:
		logger.warning("Ignoring malformed keystrokes field: %s", e.errors()[:1])
		return []


def _parse_lesson_id(raw: Optional[str]) -> Optional[int]:
	try:
		return int(raw) if raw not in (None, "") else None
	except ValueError:
		return None


def behavior_metrics(keystrokes: Optional[List[KeystrokeEvent]], time_spent: float) -> Optional[BehaviorMetrics]:
	if keystrokes is None:
		return None
	pauses = sum(
		1 for prev, cur in zip(keystrokes, keystrokes[1:]) if cur.timestamp - prev.timestamp > INTERVIEW_PAUSE_MS
	)
	total = len(keystrokes)
	return BehaviorMetrics(
		total_keystrokes=total,
		backspaces=sum(1 for k in keystrokes if k.key == "Backspace"),
		pauses=pauses,
		typing_speed=total / (time_spent / 60) if time_spent > 0 else 0.0,
	)


@router.post(
	"/comprehensive-evaluation",
	response_model=ApiResponse[EvaluationResult],
	response_model_exclude_none=True,
)
async def comprehensive_evaluation(
	lesson_id: Optional[str] = Form(default=None, alias="lessonId"),
	code: str = Form(default=""),
	transcription: str = Form(default=""),
	keystrokes: Optional[str] = Form(default=None),
	evaluator: SubmissionEvaluator = Depends(get_evaluator),
	db: Session = Depends(get_db),
):
	lesson = get_lesson(_parse_lesson_id(lesson_id))
	events = _parse_keystrokes(keystrokes)
	logger.info(
		"Comprehensive evaluation: lesson=%s code=%d chars transcript=%d chars keystrokes=%d",
		lesson_id, len(code), len(transcription), len(events),
	)
	req = GradeRequest(
		code=code,
		transcript=transcription or None,
		lesson_id=lesson.id if lesson else None,
		lesson_title=lesson.title if lesson else "Programming Practice",
		lesson_difficulty=lesson.difficulty if lesson else "Beginner",
		lesson_category=lesson.category if lesson else "General",
		keystrokes=events,
	)
	outcome = await evaluator.evaluate(req)
	store_outcome(db, outcome, req.lesson_title)
	return ApiResponse[EvaluationResult](
		data=outcome.result,
		metadata=outcome_metadata(outcome, lessonId=req.lesson_id, keystrokeCount=len(events)),
	)


@router.post("/evaluate", response_model=ApiResponse[CodeEvaluation])
async def evaluate_code(req: CodeEvaluateRequest, factory: ClientFactory = Depends(get_claude_factory)):
	keystrokes = req.keystrokes
	prompt = build_code_evaluation_prompt(
		question=req.question,
		lesson_title=req.lesson_title,
		difficulty=req.difficulty,
		code=req.code,
		keystroke_count=len(keystrokes) if keystrokes is not None else None,
		keydown_count=sum(1 for k in keystrokes if k.action == "keydown") if keystrokes is not None else None,
	)
	source = "llm"
	try:
		raw = await complete(factory, prompt, system=CODE_EVALUATION_SYSTEM, max_tokens=1500)
		evaluation = CodeEvaluation.model_validate(extract_json_object(raw))
	except (ClaudeAPIError, ValueError) as e:
		logger.warning("Code evaluation falling back to heuristics: %s", e)
		source = "heuristic"
		metrics = analyze_keystrokes(keystrokes, window_seconds=settings.keystroke_window_seconds) if keystrokes else None
		h = generate_heuristic_evaluation(req.code, None, metrics, find_lesson_by_title(req.lesson_title))
		evaluation = fallback_code_evaluation(h)

	meta = {"lessonTitle": req.lesson_title, "difficulty": req.difficulty, "source": source}
	if source == "llm":
		meta["model"] = settings.anthropic_model
	return ApiResponse[CodeEvaluation](data=evaluation, metadata=meta)


@router.post("/feedback", response_model=ApiResponse[InterviewFeedbackPayload], response_model_exclude_none=True)
async def interview_feedback(req: InterviewFeedbackRequest, factory: ClientFactory = Depends(get_claude_factory)):
	behavior = behavior_metrics(req.keystrokes, req.time_spent)
	prompt = build_interview_feedback_prompt(
		question=req.question,
		lesson_title=req.lesson_title,
		time_spent=req.time_spent,
		code=req.code,
		behavior=behavior.model_dump() if behavior is not None else None,
		transcription=req.audio_transcription,
	)
	source = "llm"
	try:
		raw = await complete(factory, prompt, system=INTERVIEW_FEEDBACK_SYSTEM, max_tokens=1500)
		feedback = InterviewFeedback.model_validate(extract_json_object(raw))
	except (ClaudeAPIError, ValueError) as e:
		logger.warning("Interview feedback falling back to behaviour metrics: %s", e)
		source = "heuristic"
		feedback = fallback_interview_feedback(req.code, req.audio_transcription, behavior)

	meta = {"lessonTitle": req.lesson_title, "timeSpent": req.time_spent, "source": source}
	if source == "llm":
		meta["model"] = settings.anthropic_model
	return ApiResponse[InterviewFeedbackPayload](
		data=InterviewFeedbackPayload(feedback=feedback, behavior_metrics=behavior),
		metadata=meta,
	)
