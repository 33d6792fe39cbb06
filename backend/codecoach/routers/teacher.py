from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from ..claude_client import ClaudeAPIError, ClientFactory, complete, get_claude_factory
from ..heuristics import COACHING_TIP_MAX_CHARS, coaching_tip
from ..keystrokes import KeystrokeRecorder, analyze_keystrokes
from ..lessons import get_lesson
from ..llm_json import extract_json_object
from ..prompts import (
	KEYSTROKE_COACH_SYSTEM,
	LECTURE_SYSTEM,
	SHORT_REPLY_RULES,
	build_chat_system,
	build_keystroke_prompt,
	build_lecture_prompt,
)
from ..schemas import (
	ApiResponse,
	ChatReply,
	ChatRequest,
	KeystrokeAnalysisRequest,
	KeystrokeCoaching,
	LectureContent,
	LectureExample,
	LectureRequest,
)
from ..settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/teacher", tags=["teacher"])

CHAT_FALLBACK_REPLY = "Sorry, I couldn't generate a response."


def fallback_lecture(lesson_title: str) -> LectureContent:
	return LectureContent(
		title=lesson_title,
		introduction=f"Welcome to the lesson on {lesson_title}. This is a fundamental concept in programming.",
		concepts=[
			"Understanding the basics",
			"Practical applications",
			"Best practices",
			"Common patterns",
			"Advanced techniques",
		],
		examples=[
			LectureExample(
				title="Basic Example",
				code=f'# Example for {lesson_title}\nprint("Learning {lesson_title}")',
				explanation="This is a basic example to get you started.",
			)
		],
		key_points=[
			"Practice regularly",
			"Start with simple examples",
			"Build complexity gradually",
			"Apply what you learn",
			"Ask questions when stuck",
		],
	)


@router.post("/keystroke-analysis", response_model=ApiResponse[KeystrokeCoaching])
async def keystroke_analysis(req: KeystrokeAnalysisRequest, factory: ClientFactory = Depends(get_claude_factory)):
	# Replay through a recorder so the same buffer bound and modifier filtering apply
	recorder = KeystrokeRecorder(max_buffer=settings.keystroke_max_buffer)
	recorder.start_tracking()
	for event in req.keystrokes:
		recorder.record_event(event)
	recorder.stop_tracking()

	metrics = analyze_keystrokes(
		recorder.events,
		window_seconds=settings.keystroke_window_seconds,
		pause_threshold_ms=settings.keystroke_pause_threshold_ms,
		burst_threshold_ms=settings.keystroke_burst_threshold_ms,
	)

	source = "heuristic"
	analysis: Optional[str] = None
	if metrics.total_keystrokes:
		ctx = req.context
		prompt = build_keystroke_prompt(
			metrics,
			lesson_title=ctx.lesson_title,
			lesson_description=ctx.lesson_description,
			analysis_window=ctx.analysis_window,
		)
		try:
			reply = await complete(factory, prompt, system=KEYSTROKE_COACH_SYSTEM, max_tokens=120, temperature=0.4)
			analysis = reply.strip()
			source = "llm"
		except (ClaudeAPIError, ValueError) as e:
			logger.warning("Keystroke coaching falling back to local tip: %s", e)
	if not analysis:
		analysis = coaching_tip(metrics)
		source = "heuristic"

	return ApiResponse[KeystrokeCoaching](
		data=KeystrokeCoaching(analysis=analysis[:COACHING_TIP_MAX_CHARS], metrics=metrics),
		metadata={"source": source, "lessonTitle": req.context.lesson_title},
	)


@router.post("/chat", response_model=ApiResponse[ChatReply])
async def chat(req: ChatRequest, factory: ClientFactory = Depends(get_claude_factory)):
	message = req.message.strip()
	if not message:
		raise HTTPException(status_code=400, detail="message is required")
	try:
		client = factory()
	except ValueError as e:
		raise HTTPException(status_code=500, detail=f"Claude API key not configured: {e}")
	try:
		text = await client.generate(
			f"{message}\n\n{SHORT_REPLY_RULES}",
			system=build_chat_system(req.context.lesson_title, req.context.lesson_description),
			max_tokens=120,
			temperature=0.5,
		)
	except ClaudeAPIError as e:
		logger.warning("Teacher chat failed: %s", e)
		if e.rate_limited:
			raise HTTPException(status_code=429, detail="Rate limit exceeded. Please try again in a moment.")
		raise HTTPException(status_code=502, detail=f"Claude request failed: {e}")
	finally:
		await client.aclose()

	return ApiResponse[ChatReply](
		data=ChatReply(message=text.strip() or CHAT_FALLBACK_REPLY),
		metadata={
			"sessionId": req.context.session_id,
			"userId": req.context.user_id,
			"model": settings.anthropic_model,
		},
	)


@router.post("/lecture", response_model=ApiResponse[LectureContent])
async def lecture(req: LectureRequest, factory: ClientFactory = Depends(get_claude_factory)):
	lesson = get_lesson(req.lesson_id)
	title = lesson.title if lesson else req.lesson_title
	description = req.lesson_description or (lesson.description if lesson else "")

	source = "llm"
	try:
		raw = await complete(factory, build_lecture_prompt(title, description), system=LECTURE_SYSTEM, max_tokens=2000)
		content = LectureContent.model_validate(extract_json_object(raw))
	except (ClaudeAPIError, ValidationError, ValueError) as e:
		logger.warning("Lecture for %r falling back to template: %s", title, e)
		source = "heuristic"
		content = fallback_lecture(title)

	return ApiResponse[LectureContent](
		data=content,
		metadata={"lessonId": req.lesson_id, "lessonTitle": title, "source": source},
	)
