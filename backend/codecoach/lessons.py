from __future__ import annotations
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


Difficulty = Literal["Beginner", "Easy", "Medium", "Hard", "Expert"]


class _CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LessonTestCase(_CamelModel):
	input: str
	expected_output: str


class WhyItMatters(_CamelModel):
	description: str
	points: List[str] = Field(default_factory=list)


class Lesson(_CamelModel):
	id: int
	title: str
	difficulty: Difficulty
	category: str
	description: str
	interview_question: str
	tasks: List[str] = Field(default_factory=list)
	expected_output: List[str] = Field(default_factory=list)
	learning_objectives: List[str] = Field(default_factory=list)
	hints: List[str] = Field(default_factory=list)
	why_it_matters: Optional[WhyItMatters] = None
	problem: str
	starter_code: str = "# Write your solution here\n"
	solution: str
	test_cases: List[LessonTestCase] = Field(default_factory=list)
	# Each inner list is one requirement; any of its alternatives satisfies it.
	required_keywords: List[List[str]] = Field(default_factory=list)


LESSONS: List[Lesson] = [
	Lesson(
		id=1,
		title="Print Statements",
		difficulty="Beginner",
		category="Python Basics",
		description="Learn the basics of Python output",
		interview_question="Write a Python program that displays 'Hello, World!' to the console.",
		tasks=[
			"Write a Python program that prints 'Hello, World!' to the console",
			"Make sure the output matches exactly",
		],
		expected_output=["Hello, World!"],
		learning_objectives=[
			"Understand the print() function",
			"Learn basic Python syntax",
			"Execute your first Python program",
		],
		hints=["Use the print() function to output text", "Remember to put the text in quotes"],
		why_it_matters=WhyItMatters(
			description="The print() function is fundamental to Python programming and debugging.",
			points=[
				"Essential for displaying output to users",
				"Critical for debugging and testing code",
				"Foundation for more complex output operations",
			],
		),
		problem="Write a Python program that prints 'Hello, World!' to the console.",
		solution="print('Hello, World!')",
		test_cases=[LessonTestCase(input="", expected_output="Hello, World!")],
		required_keywords=[["print"], ["hello, world", "hello world"]],
	),
	Lesson(
		id=2,
		title="Interactive Programming: Variables and User Input",
		difficulty="Beginner",
		category="Python Basics",
		description="Working with variables and user input",
		interview_question="Write a program that asks for the user's name and displays a personalized greeting.",
		tasks=[
			"Create a program that asks for the user's name",
			"Store the input in a variable",
			"Display a personalized greeting",
		],
		expected_output=["What's your name? Alice", "Hello, Alice! Nice to meet you."],
		learning_objectives=[
			"Learn to use the input() function",
			"Understand variable assignment",
			"Practice string formatting",
		],
		hints=["Use input() to get user input", "Use f-strings or string concatenation to combine text with variables"],
		why_it_matters=WhyItMatters(
			description="User interaction is essential for creating dynamic, responsive programs.",
			points=[
				"Foundation for interactive applications",
				"Essential for data collection",
				"Key skill for user experience design",
			],
		),
		problem="Create a program that asks for the user's name and greets them personally.",
		solution='name = input("What\'s your name? ")\nprint(f"Hello, {name}! Nice to meet you.")',
		test_cases=[LessonTestCase(input="Alice", expected_output="Hello, Alice! Nice to meet you.")],
	),
	Lesson(
		id=3,
		title="Function Design: Mathematical Operations",
		difficulty="Easy",
		category="Functions",
		description="Perform calculations with Python",
		interview_question="Write a function that takes two numbers and returns their sum, difference, product, and quotient.",
		tasks=[
			"Write a function that takes two numbers as parameters",
			"Return the sum, difference, product, and quotient",
			"Test your function with sample values",
		],
		expected_output=["(15, 5, 50, 2.0)"],
		learning_objectives=[
			"Learn function definition syntax",
			"Understand return statements",
			"Practice basic arithmetic operations",
		],
		hints=["Return multiple values as a tuple", "Use +, -, *, / for basic operations"],
		why_it_matters=WhyItMatters(
			description="Functions are the building blocks of modular, reusable code.",
			points=["Essential for code organization", "Enables code reusability", "Foundation for complex algorithms"],
		),
		problem="Write a function that takes two numbers and returns their sum, difference, product, and quotient.",
		solution="def calculate(a, b):\n    return a + b, a - b, a * b, a / b\n\nresult = calculate(10, 5)\nprint(result)",
		test_cases=[LessonTestCase(input="calculate(10, 5)", expected_output="(15, 5, 50, 2.0)")],
	),
	Lesson(
		id=4,
		title="Decision Making: If-Else Statements",
		difficulty="Easy",
		category="Control Flow",
		description="Making decisions with if statements",
		interview_question="Write a function that determines if a number is positive, negative, or zero.",
		tasks=[
			"Write a function that takes a number as input",
			"Determine if the number is positive, negative, or zero",
			"Return the appropriate classification",
		],
		expected_output=["positive", "negative", "zero"],
		learning_objectives=[
			"Master if, elif, and else statements",
			"Understand comparison operators",
			"Learn decision-making logic",
		],
		hints=["Use if, elif, and else statements", "Compare the number with 0"],
		why_it_matters=WhyItMatters(
			description="Conditional logic is fundamental to creating intelligent, responsive programs.",
			points=[
				"Essential for program flow control",
				"Enables dynamic behavior",
				"Foundation for complex decision trees",
			],
		),
		problem="Write a function that determines if a number is positive, negative, or zero.",
		solution=(
			"def check_number(num):\n    if num > 0:\n        return 'positive'\n    elif num < 0:\n"
			"        return 'negative'\n    else:\n        return 'zero'\n\n"
			"print(check_number(5))\nprint(check_number(-3))\nprint(check_number(0))"
		),
		test_cases=[
			LessonTestCase(input="check_number(5)", expected_output="positive"),
			LessonTestCase(input="check_number(-3)", expected_output="negative"),
			LessonTestCase(input="check_number(0)", expected_output="zero"),
		],
	),
	Lesson(
		id=5,
		title="Data Processing: List Iteration and Algorithms",
		difficulty="Medium",
		category="Data Structures",
		description="Working with collections and iteration",
		interview_question="Write a function that finds the maximum number in a list without using the built-in max() function.",
		tasks=[
			"Write a function that accepts a list of numbers",
			"Find the maximum number without using max()",
			"Handle edge cases like empty lists",
		],
		expected_output=["9"],
		learning_objectives=["Master for loops and iteration", "Understand list operations", "Learn algorithm thinking"],
		hints=[
			"Start with the first element as the maximum",
			"Loop through the list and compare each element",
			"Handle empty lists",
		],
		why_it_matters=WhyItMatters(
			description="Lists and loops are fundamental to data processing and algorithm implementation.",
			points=[
				"Essential for data manipulation",
				"Foundation for algorithm development",
				"Critical for processing collections",
			],
		),
		problem="Write a function that finds the maximum number in a list without using the built-in max() function.",
		solution=(
			"def find_maximum(numbers):\n    if not numbers:\n        return None\n    \n"
			"    max_num = numbers[0]\n    for num in numbers:\n        if num > max_num:\n"
			"            max_num = num\n    return max_num\n\n"
			"test_list = [3, 7, 2, 9, 1, 5]\nprint(find_maximum(test_list))"
		),
		test_cases=[LessonTestCase(input="find_maximum([3, 7, 2, 9, 1, 5])", expected_output="9")],
	),
]

_BY_ID: Dict[int, Lesson] = {lesson.id: lesson for lesson in LESSONS}


def get_lesson(lesson_id: Optional[int]) -> Optional[Lesson]:
	if lesson_id is None:
		return None
	return _BY_ID.get(lesson_id)


def find_lesson_by_title(title: Optional[str]) -> Optional[Lesson]:
	wanted = (title or "").strip().lower()
	if not wanted:
		return None
	for lesson in LESSONS:
		if lesson.title.lower() == wanted:
			return lesson
	return None
