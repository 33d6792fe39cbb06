import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .db import init_db
from .cleanup import purge_expired
from .settings import settings
from .routers import interview, lessons, questions, submissions, teacher

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="CodeCoach API")
app.include_router(submissions.router)
app.include_router(interview.router)
app.include_router(teacher.router)
app.include_router(questions.router)
app.include_router(lessons.router)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
	return JSONResponse(
		status_code=exc.status_code,
		content={"success": False, "error": str(exc.detail)},
		headers=getattr(exc, "headers", None),
	)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	return JSONResponse(
		status_code=422,
		content={"success": False, "error": "Invalid request", "metadata": {"details": jsonable_encoder(exc.errors())}},
	)


@app.get("/info")
def root():
	return {"status": "ok", "anthropicConfigured": bool(settings.anthropic_api_key)}


async def _cleanup_watcher():
	# Startup already purged once; repeat daily
	while True:
		await asyncio.sleep(24 * 60 * 60)
		purge_expired()


@app.on_event("startup")
async def startup_event():
	init_db()
	purge_expired()
	app.state.cleanup_task = asyncio.create_task(_cleanup_watcher())


@app.on_event("shutdown")
async def shutdown_event():
	task = getattr(app.state, "cleanup_task", None)
	if task is not None:
		task.cancel()
