from __future__ import annotations
import logging
import math
from typing import Any, List, get_args

from fastapi import APIRouter, Depends

from ..claude_client import ClaudeAPIError, ClientFactory, complete, get_claude_factory
from ..lessons import Difficulty
from ..llm_json import extract_json_object
from ..prompts import QUESTION_SYSTEM, build_question_prompt
from ..schemas import ApiResponse, Question, QuestionRequest, QuestionSet, QuestionTestCase
from ..settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/questions", tags=["questions"])

MIN_QUESTIONS = 1
MAX_QUESTIONS = 5
DIFFICULTIES = set(get_args(Difficulty))
DEFAULT_TOPIC = "a basic concept"
DEFAULT_HINTS = ["Start with the most basic syntax.", "Use a tiny example.", "Run it once to verify."]


def clamp_count(value: Any, default: int = 1) -> int:
	if isinstance(value, bool):
		value = int(value)
	try:
		number = float(value)
	except (TypeError, ValueError):
		return default
	if not math.isfinite(number):
		return default
	# Half-up rounding so 2.5 asks for 3 questions
	return max(MIN_QUESTIONS, min(MAX_QUESTIONS, math.floor(number + 0.5)))


def template_question(index: int, topic: str, difficulty: str, category: str) -> Question:
	return Question(
		title=f"{topic} - Practice {index + 1}",
		difficulty=difficulty,
		category=category,
		description=f"A very simple beginner task to practice: {topic}.",
		interview_question=f'Show one tiny example of "{topic}" in 2-5 lines.',
		hints=["Start with the most basic syntax.", "Use a tiny example (string or small number).", "Run it once to verify."],
		expected_approach="Use the most direct beginner-friendly code.",
		time_estimate="3-8 minutes",
		follow_up_questions=[f"How else could you show {topic}?", "What simple mistake should you avoid here?"],
		test_cases=[QuestionTestCase(input="example", expected_output="example")],
	)


def fallback_questions(count: int, topic: str, difficulty: str, category: str) -> List[Question]:
	return [template_question(i, topic, difficulty, category) for i in range(count)]


def _text(value: Any, default: str) -> str:
	if value is None:
		return default
	text = str(value).strip()
	return text or default


def _string_list(value: Any, default: List[str]) -> List[str]:
	if isinstance(value, list) and value:
		return [str(v) for v in value]
	return list(default)


def normalize_question(raw: Any, index: int, topic: str, difficulty: str, category: str) -> Question:
	"""Coerce one model-produced question into the full shape, filling gaps from the template."""
	q = raw if isinstance(raw, dict) else {}
	template = template_question(index, topic, difficulty, category)
	raw_difficulty = q.get("difficulty")

	raw_cases = q.get("testCases")
	if isinstance(raw_cases, list) and raw_cases:
		test_cases = [
			QuestionTestCase(
				input=_text(c.get("input") if isinstance(c, dict) else None, "example"),
				expected_output=_text(c.get("expectedOutput") if isinstance(c, dict) else None, "example"),
			)
			for c in raw_cases
		]
	else:
		test_cases = template.test_cases

	return Question(
		title=_text(q.get("title"), template.title),
		difficulty=raw_difficulty if isinstance(raw_difficulty, str) and raw_difficulty in DIFFICULTIES else difficulty,
		category=_text(q.get("category"), category),
		description=_text(q.get("description"), template.description),
		interview_question=_text(q.get("interviewQuestion"), template.interview_question),
		hints=_string_list(q.get("hints"), DEFAULT_HINTS),
		expected_approach=_text(q.get("expectedApproach"), template.expected_approach),
		time_estimate=_text(q.get("timeEstimate"), template.time_estimate),
		follow_up_questions=_string_list(q.get("followUpQuestions"), template.follow_up_questions),
		test_cases=test_cases,
	)


@router.post("/generate", response_model=ApiResponse[QuestionSet])
async def generate_questions(req: QuestionRequest, factory: ClientFactory = Depends(get_claude_factory)):
	topic = req.topic.strip()
	category = req.category.strip() or "General"
	context = req.context.strip()
	count = clamp_count(req.count)
	meta = {"difficulty": req.difficulty, "category": category, "topic": topic, "context": context, "count": count}

	if not topic:
		meta["source"] = "heuristic"
		questions = fallback_questions(count, DEFAULT_TOPIC, req.difficulty, category)
		return ApiResponse[QuestionSet](data=QuestionSet(questions=questions), metadata=meta)

	raw_questions: List[Any] = []
	try:
		raw = await complete(
			factory,
			build_question_prompt(count=count, topic=topic, context=context, difficulty=req.difficulty, category=category),
			system=QUESTION_SYSTEM,
			max_tokens=1200,
		)
		parsed = extract_json_object(raw).get("questions")
		if isinstance(parsed, list):
			raw_questions = parsed
	except (ClaudeAPIError, ValueError) as e:
		logger.warning("Question generation for %r falling back to templates: %s", topic, e)

	questions = [normalize_question(q, i, topic, req.difficulty, category) for i, q in enumerate(raw_questions[:count])]
	meta["source"] = "llm" if questions else "heuristic"
	if questions:
		meta["model"] = settings.anthropic_model
	# Pad short replies so callers always get the number they asked for
	questions += [template_question(i, topic, req.difficulty, category) for i in range(len(questions), count)]
	return ApiResponse[QuestionSet](data=QuestionSet(questions=questions), metadata=meta)
