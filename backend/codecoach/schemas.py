from __future__ import annotations
import math
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictBool, StringConstraints
from pydantic.alias_generators import to_camel

from .keystrokes import KeystrokeEvent, KeystrokeMetrics
from .lessons import Difficulty


T = TypeVar("T")


def _percentage(value: Any) -> int:
	if isinstance(value, bool) or not isinstance(value, (int, float, str)):
		raise ValueError("expected a number")
	number = float(value)
	if not math.isfinite(number):
		raise ValueError("expected a finite number")
	return max(0, min(100, round(number)))


# Accepts any finite number (or numeric string) and clamps it into 0..100
Percentage = Annotated[int, BeforeValidator(_percentage)]

# Blank model output counts as missing
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
	success: bool = True
	data: Optional[T] = None
	error: Optional[str] = None
	metadata: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------- evaluation

class CodeAnalysis(CamelModel):
	quality: int = Field(ge=0, le=100)
	efficiency: int = Field(ge=0, le=100)
	readability: int = Field(ge=0, le=100)


class AudioAnalysis(CamelModel):
	clarity: int = Field(ge=0, le=100)
	explanation: int = Field(ge=0, le=100)
	confidence: int = Field(ge=0, le=100)
	transcription: str = ""


class EvaluationResult(CamelModel):
	id: str
	submission_id: str
	score: int = Field(ge=0, le=100)
	confidence_score: int = Field(ge=0, le=100)
	is_correct: bool
	feedback: str
	code_analysis: CodeAnalysis
	audio_analysis: Optional[AudioAnalysis] = None
	created_at: str


class GradeRequest(CamelModel):
	submission_id: Optional[str] = None
	code: str = ""
	transcript: Optional[str] = None
	lesson_id: Optional[int] = None
	lesson_title: str = "Programming Practice"
	lesson_difficulty: Difficulty = "Beginner"
	lesson_category: str = "General"
	keystrokes: List[KeystrokeEvent] = Field(default_factory=list)


class CodeEvaluateRequest(CamelModel):
	code: str = ""
	question: str = ""
	lesson_title: str = "Programming Practice"
	difficulty: Difficulty = "Beginner"
	keystrokes: Optional[List[KeystrokeEvent]] = None


class DetailedCodeAnalysis(CamelModel):
	quality: Percentage
	efficiency: Percentage
	readability: Percentage
	best_practices: Percentage


class CodeEvaluation(CamelModel):
	score: Percentage
	is_correct: StrictBool
	feedback: NonBlankStr
	code_analysis: DetailedCodeAnalysis
	suggestions: List[str] = Field(default_factory=list)
	interview_feedback: str = ""
	strengths: List[str] = Field(default_factory=list)
	improvements: List[str] = Field(default_factory=list)


class InterviewFeedbackRequest(CamelModel):
	keystrokes: Optional[List[KeystrokeEvent]] = None
	time_spent: float = 0
	code: str = ""
	question: str = ""
	lesson_title: str = "Programming Practice"
	audio_transcription: Optional[str] = None


class InterviewPerformance(CamelModel):
	problem_solving: Percentage
	communication: Percentage
	coding_style: Percentage
	time_management: Percentage


class BehaviorAnalysis(CamelModel):
	confidence: str
	approach: str
	thinking_process: str


class InterviewFeedback(CamelModel):
	overall_score: Percentage
	interview_performance: InterviewPerformance
	behavior_analysis: BehaviorAnalysis
	feedback: NonBlankStr
	strengths: List[str] = Field(default_factory=list)
	improvements: List[str] = Field(default_factory=list)
	interview_tips: List[str] = Field(default_factory=list)
	next_steps: str = ""


class BehaviorMetrics(CamelModel):
	total_keystrokes: int
	backspaces: int
	pauses: int
	typing_speed: float


class InterviewFeedbackPayload(CamelModel):
	feedback: InterviewFeedback
	behavior_metrics: Optional[BehaviorMetrics] = None


# ---------------------------------------------------------------- teacher

class TeacherContext(CamelModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

	lesson_title: Optional[str] = None
	lesson_description: Optional[str] = None
	analysis_window: Optional[str] = None
	session_id: Optional[str] = None
	user_id: Optional[str] = None


class ChatRequest(CamelModel):
	message: str
	context: TeacherContext = Field(default_factory=TeacherContext)


class ChatReply(CamelModel):
	message: str


class KeystrokeAnalysisRequest(CamelModel):
	keystrokes: List[KeystrokeEvent] = Field(default_factory=list)
	context: TeacherContext = Field(default_factory=TeacherContext)


class KeystrokeCoaching(CamelModel):
	analysis: str
	metrics: KeystrokeMetrics


class LectureRequest(CamelModel):
	lesson_id: Optional[int] = None
	lesson_title: str = "Programming Practice"
	lesson_description: str = ""


class LectureExample(CamelModel):
	title: str
	code: str
	explanation: str


class LectureContent(CamelModel):
	title: str
	introduction: str
	concepts: List[str] = Field(min_length=1)
	examples: List[LectureExample] = Field(min_length=1)
	key_points: List[str] = Field(min_length=1)


# ---------------------------------------------------------------- questions

class QuestionTestCase(CamelModel):
	input: str
	expected_output: str


class Question(CamelModel):
	title: str
	difficulty: Difficulty
	category: str
	description: str
	interview_question: str
	hints: List[str]
	expected_approach: str
	time_estimate: str
	follow_up_questions: List[str]
	test_cases: List[QuestionTestCase]


class QuestionRequest(CamelModel):
	topic: str = ""
	difficulty: Difficulty = "Beginner"
	category: str = "General"
	context: str = ""
	count: Any = 1


class QuestionSet(CamelModel):
	questions: List[Question]
