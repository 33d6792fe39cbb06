import json

from codecoach.claude_client import ClaudeAPIError


def typing(n, step=250, key="a"):
	return [{"timestamp": i * step, "key": key} for i in range(n)]


def test_keystroke_analysis_empty(client, use_claude):
	fake = use_claude("should not be used")
	response = client.post("/api/teacher/keystroke-analysis", json={"keystrokes": [], "context": {"lessonTitle": "Loops"}})
	assert response.status_code == 200
	data = response.json()["data"]
	assert data["metrics"]["totalKeystrokes"] == 0
	assert data["metrics"]["wpm"] == 0
	assert "Start typing" in data["analysis"]
	assert fake.calls == []


def test_keystroke_analysis_with_claude(client, use_claude):
	fake = use_claude("  Nice rhythm; keep your loop body short.  ")
	events = typing(20) + [{"timestamp": 5000, "key": "Shift"}, {"timestamp": 5100, "key": "Backspace"}]
	response = client.post(
		"/api/teacher/keystroke-analysis",
		json={"keystrokes": events, "context": {"lessonTitle": "Loops", "analysisWindow": "45 seconds"}},
	)
	body = response.json()
	assert body["data"]["analysis"] == "Nice rhythm; keep your loop body short."
	assert body["data"]["metrics"]["totalKeystrokes"] == 21
	assert body["data"]["metrics"]["backspaces"] == 1
	assert body["metadata"]["source"] == "llm"
	assert "Lesson: Loops" in fake.calls[0]["prompt"]


def test_keystroke_analysis_truncates_long_tips(client, use_claude):
	use_claude("x" * 900)
	response = client.post("/api/teacher/keystroke-analysis", json={"keystrokes": typing(5)})
	assert len(response.json()["data"]["analysis"]) == 600


def test_keystroke_analysis_falls_back_locally(client):
	response = client.post("/api/teacher/keystroke-analysis", json={"keystrokes": typing(10, step=3000)})
	body = response.json()
	assert response.status_code == 200
	assert body["metadata"]["source"] == "heuristic"
	assert "pauses" in body["data"]["analysis"]


def test_chat_reply(client, use_claude):
	fake = use_claude("Try printing the variable before the loop.")
	response = client.post(
		"/api/teacher/chat",
		json={"message": "I'm stuck", "context": {"lessonTitle": "Loops", "sessionId": "abc"}},
	)
	assert response.status_code == 200
	body = response.json()
	assert body["data"]["message"] == "Try printing the variable before the loop."
	assert body["metadata"]["sessionId"] == "abc"
	assert "Loops" in fake.calls[0]["system"]
	assert fake.calls[0]["max_tokens"] == 120


def test_chat_empty_reply_gets_default(client, use_claude):
	use_claude("")
	response = client.post("/api/teacher/chat", json={"message": "hi"})
	assert response.json()["data"]["message"] == "Sorry, I couldn't generate a response."


def test_chat_without_key_is_500(client):
	response = client.post("/api/teacher/chat", json={"message": "hi"})
	assert response.status_code == 500
	body = response.json()
	assert body["success"] is False
	assert "not configured" in body["error"]


def test_chat_rate_limited_is_429(client, use_claude):
	fake = use_claude(ClaudeAPIError("Claude HTTP 429", status_code=429))
	response = client.post("/api/teacher/chat", json={"message": "hi"})
	assert response.status_code == 429
	assert fake.closed == 1


def test_chat_upstream_failure_is_502(client, use_claude):
	use_claude(ClaudeAPIError("Claude request failed: timeout"))
	response = client.post("/api/teacher/chat", json={"message": "hi"})
	assert response.status_code == 502


def test_chat_blank_message_is_400(client):
	response = client.post("/api/teacher/chat", json={"message": "   "})
	assert response.status_code == 400


def test_lecture_from_claude(client, use_claude):
	content = {
		"title": "Loops",
		"introduction": "Loops repeat work.",
		"concepts": ["for", "while"],
		"examples": [{"title": "Count", "code": "for i in range(3): print(i)", "explanation": "Prints 0..2"}],
		"keyPoints": ["Avoid infinite loops"],
	}
	use_claude(f"```json\n{json.dumps(content)}\n```")
	response = client.post("/api/teacher/lecture", json={"lessonTitle": "Loops"})
	body = response.json()
	assert body["data"]["keyPoints"] == ["Avoid infinite loops"]
	assert body["metadata"]["source"] == "llm"


def test_lecture_fallback_uses_lesson_title(client, use_claude):
	use_claude(json.dumps({"title": "Incomplete"}))
	response = client.post("/api/teacher/lecture", json={"lessonId": 3})
	assert response.status_code == 200
	body = response.json()
	data = body["data"]
	assert data["title"] == "Function Design: Mathematical Operations"
	assert len(data["concepts"]) == 5
	assert data["examples"][0]["code"].startswith("# Example for Function Design")
	assert body["metadata"]["source"] == "heuristic"
