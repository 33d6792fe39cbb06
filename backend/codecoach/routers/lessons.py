from __future__ import annotations
from typing import List

from fastapi import APIRouter, HTTPException

from ..lessons import LESSONS, Lesson, get_lesson
from ..schemas import ApiResponse

router = APIRouter(prefix="/api/lessons", tags=["lessons"])


@router.get("", response_model=ApiResponse[List[Lesson]])
def list_lessons():
	return ApiResponse[List[Lesson]](data=LESSONS, metadata={"count": len(LESSONS)})


@router.get("/{lesson_id}", response_model=ApiResponse[Lesson])
def read_lesson(lesson_id: int):
	lesson = get_lesson(lesson_id)
	if lesson is None:
		raise HTTPException(status_code=404, detail="Lesson not found")
	return ApiResponse[Lesson](data=lesson)
