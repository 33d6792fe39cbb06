"""
Network-free evaluation used whenever Claude is unavailable or its output is
unusable. Scores are bucketed by which inputs are present and nudged by a
small amount of jitter drawn from an injectable ``random.Random``.
"""

from __future__ import annotations

import random
import re
import secrets
from typing import List, Optional

from pydantic import BaseModel

from .keystrokes import KeystrokeMetrics
from .lessons import Lesson
from .schemas import (
	AudioAnalysis,
	BehaviorAnalysis,
	BehaviorMetrics,
	CodeAnalysis,
	CodeEvaluation,
	DetailedCodeAnalysis,
	InterviewFeedback,
	InterviewPerformance,
)


FILLER_WORDS: List[str] = ["um", "uh", "like", "you know", "basically", "actually"]
CONFIDENCE_WORDS: List[str] = ["definitely", "clearly", "obviously", "certainly", "exactly"]

MIN_CONFIDENCE = 30
MAX_CONFIDENCE = 95
CORRECTNESS_THRESHOLD = 60
SOLUTION_OVERLAP = 0.6
TRANSCRIPT_PREVIEW_CHARS = 200


def _vocabulary_pattern(words: List[str]) -> re.Pattern:
	alternatives = "|".join(r"\s+".join(map(re.escape, w.split())) for w in words)
	return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


_FILLER_RE = _vocabulary_pattern(FILLER_WORDS)
_CONFIDENCE_RE = _vocabulary_pattern(CONFIDENCE_WORDS)


class HeuristicEvaluation(BaseModel):
	confidence_score: int
	is_correct: bool
	feedback: str
	code_analysis: CodeAnalysis
	audio_analysis: Optional[AudioAnalysis] = None


def new_rng() -> random.Random:
	return random.Random(secrets.randbits(64))


def count_filler_words(transcript: str) -> int:
	return len(_FILLER_RE.findall(transcript or ""))


def count_confidence_words(transcript: str) -> int:
	return len(_CONFIDENCE_RE.findall(transcript or ""))


def _normalize_code(text: str) -> str:
	return re.sub(r"\s+", " ", (text or "").lower()).strip()


def matches_lesson(code: str, lesson: Lesson) -> bool:
	"""Similarity check against the lesson's reference solution.

	Lessons that declare ``required_keywords`` pass when every keyword group has
	at least one alternative in the code. Otherwise at least 60% of the
	solution's whitespace-separated tokens must appear in the submission.
	"""
	user_code = _normalize_code(code)
	if not user_code:
		return False
	if lesson.required_keywords:
		return all(any(alt in user_code for alt in group) for group in lesson.required_keywords)
	solution_tokens = _normalize_code(lesson.solution).split(" ")
	code_tokens = set(user_code.split(" "))
	matching = sum(1 for token in solution_tokens if token in code_tokens)
	return matching >= len(solution_tokens) * SOLUTION_OVERLAP


def truncate_transcript(transcript: str) -> str:
	if len(transcript) > TRANSCRIPT_PREVIEW_CHARS:
		return transcript[:TRANSCRIPT_PREVIEW_CHARS] + "..."
	return transcript


def _compose_feedback(
	*,
	has_code: bool,
	has_transcript: bool,
	is_correct: bool,
	score: int,
	fillers: int,
	confident: int,
	metrics: Optional[KeystrokeMetrics],
) -> str:
	parts: List[str] = []
	if has_code and has_transcript:
		if is_correct:
			parts.append(f"Great job providing a working solution and a verbal explanation! Your confidence score of {score}% reflects good technical communication.")
		else:
			parts.append(f"You provided both code and an explanation, but the solution needs work. Confidence score: {score}%. Review the problem requirements.")
	elif has_code:
		if is_correct:
			parts.append(f"Your code solution looks correct ({score}% confidence), but adding a verbal explanation would significantly improve your interview performance.")
		else:
			parts.append(f"Code attempt detected ({score}% confidence), but it does not yet meet the requirements. Practice explaining your thought process out loud as you fix it.")
	elif has_transcript:
		parts.append("Good verbal communication detected, but no code solution was provided. Make sure to implement your ideas in code during technical interviews.")
	else:
		parts.append("No code or verbal explanation detected. In technical interviews, provide both a working solution and a clear explanation of your approach.")

	if fillers > 3:
		parts.append(f"Try to reduce filler words (detected {fillers}) to sound more confident.")
	if confident > 0:
		parts.append("Your use of confident language shows good technical understanding.")

	if metrics is not None and metrics.total_keystrokes > 0:
		if metrics.error_rate > 0.2:
			parts.append(f"You corrected about {metrics.error_percent}% of what you typed; pause to plan a line before writing it.")
		if metrics.long_pauses >= 3:
			parts.append(f"There were {metrics.long_pauses} long pauses while coding; narrate what you are considering so the interviewer can follow.")

	if has_code and has_transcript:
		parts.append("Continue practicing to improve your interview performance.")
	return " ".join(parts)


def generate_heuristic_evaluation(
	code: Optional[str],
	transcript: Optional[str],
	metrics: Optional[KeystrokeMetrics] = None,
	lesson: Optional[Lesson] = None,
	*,
	rng: Optional[random.Random] = None,
) -> HeuristicEvaluation:
	rng = rng or new_rng()
	code = code or ""
	transcript = (transcript or "").strip()
	has_code = bool(code.strip())
	has_transcript = bool(transcript)

	fillers = count_filler_words(transcript) if has_transcript else 0
	confident = count_confidence_words(transcript) if has_transcript else 0

	score = 75 if has_code else 45
	if has_transcript:
		score += 15
	score -= min(fillers * 3, 20)
	score += min(confident * 2, 10)
	score += rng.randint(0, 9)
	score = max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, score))

	if lesson is not None and lesson.solution:
		is_correct = matches_lesson(code, lesson)
	else:
		is_correct = has_code and score > CORRECTNESS_THRESHOLD

	if is_correct:
		quality = rng.randint(80, 94)
		efficiency = rng.randint(75, 89)
	elif has_code:
		quality = rng.randint(70, 89)
		efficiency = rng.randint(65, 89)
	else:
		quality, efficiency = 50, 45
	readability = rng.randint(75, 89) if has_code else 55

	audio: Optional[AudioAnalysis] = None
	if has_transcript:
		audio = AudioAnalysis(
			clarity=max(60, 90 - fillers * 2),
			explanation=rng.randint(70, 89),
			confidence=min(100, max(50, 85 - fillers * 3 + confident * 5)),
			transcription=truncate_transcript(transcript),
		)

	return HeuristicEvaluation(
		confidence_score=score,
		is_correct=is_correct,
		feedback=_compose_feedback(
			has_code=has_code,
			has_transcript=has_transcript,
			is_correct=is_correct,
			score=score,
			fillers=fillers,
			confident=confident,
			metrics=metrics,
		),
		code_analysis=CodeAnalysis(quality=quality, efficiency=efficiency, readability=readability),
		audio_analysis=audio,
	)


COACHING_TIP_MAX_CHARS = 600


def coaching_tip(metrics: KeystrokeMetrics) -> str:
	"""One short pacing tip derived only from keystroke metrics."""
	if metrics.total_keystrokes == 0:
		tip = "Start typing your solution and I'll share pacing tips as you go."
	elif metrics.error_rate > 0.2:
		tip = (
			f"You are correcting about {metrics.error_percent}% of your keystrokes; "
			"slow down slightly and think through each line before typing it."
		)
	elif metrics.long_pauses >= 3:
		tip = (
			f"I noticed {metrics.long_pauses} long pauses; sketch the steps as comments first "
			"so you always know what to type next."
		)
	elif metrics.typing_keys and metrics.wpm < 15:
		tip = f"You're typing at about {metrics.wpm} WPM; that's fine, focus on getting one small piece working, then build on it."
	else:
		tip = f"Steady pace at about {metrics.wpm} WPM with few corrections; keep going and run your code early to check it."
	return tip[:COACHING_TIP_MAX_CHARS]


def fallback_code_evaluation(h: HeuristicEvaluation) -> CodeEvaluation:
	"""Interview-style code review assembled from a heuristic evaluation."""
	ca = h.code_analysis
	best_practices = round((ca.quality + ca.readability) / 2) - 5
	if h.is_correct:
		strengths = ["Correct solution", "Clean structure"]
		interview_feedback = "Good problem-solving approach. Practice explaining your thought process aloud."
	else:
		strengths = ["Attempted the problem"] if ca.quality > 50 else []
		interview_feedback = "Talk through the requirements and test one small example before writing the full solution."
	return CodeEvaluation(
		score=h.confidence_score,
		is_correct=h.is_correct,
		feedback=h.feedback,
		code_analysis=DetailedCodeAnalysis(
			quality=ca.quality,
			efficiency=ca.efficiency,
			readability=ca.readability,
			best_practices=best_practices,
		),
		suggestions=["Add more descriptive variable names", "Include error handling", "Add comments to explain logic"],
		interview_feedback=interview_feedback,
		strengths=strengths,
		improvements=["Code documentation", "Edge case handling"],
	)


def fallback_interview_feedback(
	code: str,
	transcription: Optional[str],
	behavior: Optional[BehaviorMetrics],
) -> InterviewFeedback:
	has_code = bool((code or "").strip())
	has_explanation = bool((transcription or "").strip())

	problem_solving = 80 if has_code else 40
	communication = 75 if has_explanation else 60
	coding_style = 75 if has_code else 40
	time_management = 70
	if behavior is not None and behavior.total_keystrokes:
		correction_ratio = behavior.backspaces / behavior.total_keystrokes
		coding_style -= min(20, round(correction_ratio * 50))
		time_management = max(40, 80 - 5 * behavior.pauses)
	overall = round((problem_solving + communication + coding_style + time_management) / 4)

	if overall >= 80:
		confidence = "High"
	elif overall >= 60:
		confidence = "Medium"
	else:
		confidence = "Low"

	strengths: List[str] = []
	if has_code:
		strengths += ["Produced a working attempt", "Logical approach"]
	if has_explanation:
		strengths.append("Explained the solution out loud")
	improvements = ["Ask clarifying questions"]
	if not has_explanation:
		improvements.insert(0, "Explain thinking process aloud")
	if not has_code:
		improvements.insert(0, "Write code for your idea, even a partial version")

	return InterviewFeedback(
		overall_score=overall,
		interview_performance=InterviewPerformance(
			problem_solving=problem_solving,
			communication=communication,
			coding_style=coding_style,
			time_management=time_management,
		),
		behavior_analysis=BehaviorAnalysis(
			confidence=confidence,
			approach="Systematic problem-solving approach" if has_code else "Approach not yet visible in code",
			thinking_process="Shows logical thinking with room for improvement in communication",
		),
		feedback="Good technical solution with opportunities to improve interview communication skills."
		if has_code
		else "Focus on turning your ideas into code; interviewers need to see a concrete attempt.",
		strengths=strengths,
		improvements=improvements,
		interview_tips=[
			"Verbalize your thought process",
			"Ask questions about requirements",
			"Test your solution with examples",
		],
		next_steps="Practice explaining your code and approach out loud during problem solving.",
	)
