import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from codecoach.claude_client import get_claude_factory
from codecoach.db import Base, get_db, init_db, make_engine
from codecoach.main import app


class FakeClaude:
	"""Replaces ClaudeClient. Replies are consumed in order; an exception reply is raised."""

	def __init__(self, *replies):
		self.replies = list(replies)
		self.calls = []
		self.closed = 0

	def factory(self, *args, **kwargs):
		return self

	async def generate(self, prompt, **kwargs):
		self.calls.append({"prompt": prompt, **kwargs})
		reply = self.replies.pop(0) if self.replies else ""
		if isinstance(reply, Exception):
			raise reply
		return reply

	async def aclose(self):
		self.closed += 1


def missing_key_factory(*args, **kwargs):
	raise ValueError("ANTHROPIC_API_KEY is not configured")


@pytest.fixture
def fake_claude():
	return FakeClaude


@pytest.fixture
def session_factory():
	engine = make_engine("sqlite://", poolclass=StaticPool)
	init_db(engine)
	yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
	Base.metadata.drop_all(bind=engine)
	engine.dispose()


@pytest.fixture
def client(session_factory):
	def override_get_db():
		db = session_factory()
		try:
			yield db
		finally:
			db.close()

	app.dependency_overrides[get_db] = override_get_db
	app.dependency_overrides[get_claude_factory] = lambda: missing_key_factory
	yield TestClient(app)
	app.dependency_overrides.clear()


@pytest.fixture
def use_claude(client):
	"""Route every Claude call made by the app to a FakeClaude with the given replies."""

	def install(*replies):
		fake = FakeClaude(*replies)
		app.dependency_overrides[get_claude_factory] = lambda: fake.factory
		return fake

	return install
