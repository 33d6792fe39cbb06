"""
Submission grading: Claude first, local heuristics on any expected failure.

The caller always receives a complete ``EvaluationResult``. Claude output is
validated against a strict schema before use; a missing or wrongly typed
required field is treated the same as a failed call.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fastapi import Depends
from pydantic import StrictBool, ValidationError, model_validator

from .claude_client import ClaudeAPIError, ClaudeClient, ClientFactory, complete, get_claude_factory
from .heuristics import (
	MAX_CONFIDENCE,
	MIN_CONFIDENCE,
	HeuristicEvaluation,
	generate_heuristic_evaluation,
	new_rng,
	truncate_transcript,
)
from .keystrokes import KeystrokeMetrics, analyze_keystrokes
from .lessons import Lesson, find_lesson_by_title, get_lesson
from .llm_json import extract_json_object
from .prompts import GRADE_SYSTEM, build_grade_prompt
from .schemas import AudioAnalysis, CamelModel, CodeAnalysis, EvaluationResult, GradeRequest, NonBlankStr, Percentage
from .settings import settings

logger = logging.getLogger(__name__)


class LLMCodeAnalysis(CamelModel):
	quality: Percentage
	efficiency: Percentage
	readability: Percentage


class LLMAudioAnalysis(CamelModel):
	clarity: Percentage
	explanation: Percentage
	confidence: Percentage
	transcription: str = ""


class LLMGrade(CamelModel):
	score: Optional[Percentage] = None
	confidence_score: Percentage
	is_correct: StrictBool
	feedback: NonBlankStr
	code_analysis: LLMCodeAnalysis
	audio_analysis: Optional[LLMAudioAnalysis] = None

	@model_validator(mode="before")
	@classmethod
	def _confidence_from_score(cls, data: Any) -> Any:
		if isinstance(data, dict) and data.get("confidenceScore") is None and data.get("score") is not None:
			return {**data, "confidenceScore": data["score"]}
		return data


@dataclass
class EvaluationOutcome:
	result: EvaluationResult
	source: str  # "llm" or "heuristic"
	fallback_reason: Optional[str] = None


def _utcnow_iso() -> str:
	return datetime.now(timezone.utc).isoformat()


class SubmissionEvaluator:
	def __init__(
		self,
		client_factory: ClientFactory = ClaudeClient,
		*,
		rng: Optional[random.Random] = None,
		clock: Callable[[], str] = _utcnow_iso,
	) -> None:
		self._client_factory = client_factory
		self._rng = rng
		self._clock = clock

	def resolve_lesson(self, req: GradeRequest) -> Optional[Lesson]:
		return get_lesson(req.lesson_id) or find_lesson_by_title(req.lesson_title)

	def metrics_for(self, req: GradeRequest) -> Optional[KeystrokeMetrics]:
		if not req.keystrokes:
			return None
		return analyze_keystrokes(
			req.keystrokes,
			window_seconds=settings.keystroke_window_seconds,
			pause_threshold_ms=settings.keystroke_pause_threshold_ms,
			burst_threshold_ms=settings.keystroke_burst_threshold_ms,
		)

	def heuristic(
		self,
		req: GradeRequest,
		*,
		lesson: Optional[Lesson] = None,
		metrics: Optional[KeystrokeMetrics] = None,
	) -> HeuristicEvaluation:
		return generate_heuristic_evaluation(
			req.code,
			req.transcript,
			metrics,
			lesson,
			rng=self._rng or new_rng(),
		)

	def _from_heuristic(self, submission_id: str, h: HeuristicEvaluation) -> EvaluationResult:
		return EvaluationResult(
			id=uuid.uuid4().hex,
			submission_id=submission_id,
			score=h.confidence_score,
			confidence_score=h.confidence_score,
			is_correct=h.is_correct,
			feedback=h.feedback,
			code_analysis=h.code_analysis,
			audio_analysis=h.audio_analysis,
			created_at=self._clock(),
		)

	def _from_llm(
		self,
		submission_id: str,
		grade: LLMGrade,
		transcript: str,
		heuristic_audio: Callable[[], Optional[AudioAnalysis]],
	) -> EvaluationResult:
		confidence = max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, grade.confidence_score))
		audio: Optional[AudioAnalysis] = None
		if transcript:
			if grade.audio_analysis is not None:
				audio = AudioAnalysis(
					clarity=grade.audio_analysis.clarity,
					explanation=grade.audio_analysis.explanation,
					confidence=grade.audio_analysis.confidence,
					transcription=grade.audio_analysis.transcription or truncate_transcript(transcript),
				)
			else:
				audio = heuristic_audio()
		return EvaluationResult(
			id=uuid.uuid4().hex,
			submission_id=submission_id,
			score=grade.score if grade.score is not None else confidence,
			confidence_score=confidence,
			is_correct=grade.is_correct,
			feedback=grade.feedback.strip(),
			code_analysis=CodeAnalysis(
				quality=grade.code_analysis.quality,
				efficiency=grade.code_analysis.efficiency,
				readability=grade.code_analysis.readability,
			),
			audio_analysis=audio,
			created_at=self._clock(),
		)

	async def _ask_claude(self, req: GradeRequest, lesson: Optional[Lesson], metrics: Optional[KeystrokeMetrics]) -> LLMGrade:
		raw = await complete(
			self._client_factory,
			build_grade_prompt(
				lesson_title=req.lesson_title,
				lesson_difficulty=req.lesson_difficulty,
				lesson_category=req.lesson_category,
				code=req.code,
				transcript=(req.transcript or "").strip() or None,
				problem=lesson.problem if lesson else None,
				metrics=metrics,
			),
			system=GRADE_SYSTEM,
			max_tokens=1000,
			temperature=0.3,
		)
		return LLMGrade.model_validate(extract_json_object(raw))

	async def evaluate(self, req: GradeRequest) -> EvaluationOutcome:
		submission_id = req.submission_id or uuid.uuid4().hex
		lesson = self.resolve_lesson(req)
		metrics = self.metrics_for(req)
		transcript = (req.transcript or "").strip()

		try:
			grade = await self._ask_claude(req, lesson, metrics)
		except (ClaudeAPIError, ValidationError, ValueError) as e:
			reason = f"{type(e).__name__}: {e}"
			logger.warning("Grading submission %s with heuristics (%s)", submission_id, reason[:300])
			h = self.heuristic(req, lesson=lesson, metrics=metrics)
			return EvaluationOutcome(self._from_heuristic(submission_id, h), "heuristic", reason)

		def heuristic_audio() -> Optional[AudioAnalysis]:
			return self.heuristic(req, lesson=lesson, metrics=metrics).audio_analysis

		result = self._from_llm(submission_id, grade, transcript, heuristic_audio)
		return EvaluationOutcome(result, "llm")


def get_evaluator(factory: ClientFactory = Depends(get_claude_factory)) -> SubmissionEvaluator:
	return SubmissionEvaluator(factory)
