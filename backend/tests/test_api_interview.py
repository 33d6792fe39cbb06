import json

from codecoach.claude_client import ClaudeAPIError


def keystrokes(*stamps, key="a"):
	return [{"timestamp": ts, "key": key, "action": "keydown", "code": ""} for ts in stamps]


def test_comprehensive_evaluation_form(client):
	response = client.post(
		"/api/interview/comprehensive-evaluation",
		data={
			"lessonId": "1",
			"code": "print('Hello, World!')",
			"transcription": "",
			"keystrokes": json.dumps(keystrokes(0, 150, 300)),
		},
	)
	assert response.status_code == 200
	body = response.json()
	assert body["data"]["isCorrect"] is True
	assert "audioAnalysis" not in body["data"]
	assert body["metadata"]["lessonId"] == 1
	assert body["metadata"]["keystrokeCount"] == 3


def test_comprehensive_evaluation_tolerates_bad_keystrokes(client):
	response = client.post(
		"/api/interview/comprehensive-evaluation",
		data={"code": "x = 1", "transcription": "I assign x", "keystrokes": "{not json"},
	)
	assert response.status_code == 200
	body = response.json()
	assert body["metadata"]["keystrokeCount"] == 0
	assert body["data"]["audioAnalysis"]["transcription"] == "I assign x"


def test_code_evaluation_with_claude(client, use_claude):
	reply = {
		"score": 120,
		"isCorrect": True,
		"feedback": "Solid.",
		"codeAnalysis": {"quality": 90, "efficiency": 80, "readability": 95, "bestPractices": 85},
		"suggestions": ["Add a docstring"],
		"interviewFeedback": "Talk more.",
		"strengths": ["Correct"],
		"improvements": ["Tests"],
	}
	fake = use_claude(json.dumps(reply))
	response = client.post(
		"/api/interview/evaluate",
		json={"code": "print(1)", "question": "Print one", "keystrokes": keystrokes(0, 100) + [{"timestamp": 200, "key": "a", "action": "keyup"}]},
	)
	body = response.json()
	assert body["data"]["score"] == 100
	assert body["data"]["codeAnalysis"]["bestPractices"] == 85
	assert body["metadata"]["source"] == "llm"
	assert "3 keystrokes" in fake.calls[0]["prompt"]
	assert "2 key presses" in fake.calls[0]["prompt"]


def test_code_evaluation_falls_back(client):
	response = client.post("/api/interview/evaluate", json={"code": "print('hi')", "question": "Say hi"})
	assert response.status_code == 200
	body = response.json()
	assert body["metadata"]["source"] == "heuristic"
	data = body["data"]
	assert set(data["codeAnalysis"]) == {"quality", "efficiency", "readability", "bestPractices"}
	assert data["feedback"]
	assert data["suggestions"]


def test_interview_feedback_behaviour_metrics(client):
	response = client.post(
		"/api/interview/feedback",
		json={
			"keystrokes": keystrokes(0, 4000, 4100) + [{"timestamp": 4200, "key": "Backspace"}],
			"timeSpent": 60,
			"code": "print(1)",
			"question": "Print one",
		},
	)
	assert response.status_code == 200
	body = response.json()
	metrics = body["data"]["behaviorMetrics"]
	assert metrics == {"totalKeystrokes": 4, "backspaces": 1, "pauses": 1, "typingSpeed": 4.0}
	feedback = body["data"]["feedback"]
	assert 0 <= feedback["overallScore"] <= 100
	assert feedback["behaviorAnalysis"]["confidence"] in {"High", "Medium", "Low"}
	assert body["metadata"]["source"] == "heuristic"


def test_interview_feedback_without_keystrokes(client):
	response = client.post("/api/interview/feedback", json={"timeSpent": 0, "code": ""})
	body = response.json()
	assert "behaviorMetrics" not in body["data"]
	assert body["data"]["feedback"]["feedback"]


def test_interview_feedback_with_claude(client, use_claude):
	reply = {
		"overallScore": 82,
		"interviewPerformance": {"problemSolving": 90, "communication": 70, "codingStyle": 85, "timeManagement": 150},
		"behaviorAnalysis": {"confidence": "High", "approach": "Direct", "thinkingProcess": "Clear"},
		"feedback": "Well done.",
		"strengths": ["Fast"],
		"improvements": ["Explain"],
		"interviewTips": ["Ask questions"],
		"nextSteps": "Practice aloud.",
	}
	fake = use_claude(json.dumps(reply))
	response = client.post(
		"/api/interview/feedback",
		json={"timeSpent": 30, "code": "print(1)", "audioTranscription": "I print one", "keystrokes": keystrokes(0, 100)},
	)
	body = response.json()
	assert body["data"]["feedback"]["interviewPerformance"]["timeManagement"] == 100
	assert body["metadata"]["source"] == "llm"
	prompt = fake.calls[0]["prompt"]
	assert "I print one" in prompt
	assert "Total keystrokes: 2" in prompt


def test_interview_feedback_upstream_failure(client, use_claude):
	use_claude(ClaudeAPIError("Claude HTTP 500", status_code=500))
	response = client.post("/api/interview/feedback", json={"timeSpent": 10, "code": "x = 1"})
	assert response.status_code == 200
	assert response.json()["metadata"]["source"] == "heuristic"


def test_code_evaluation_blank_feedback_falls_back(client, use_claude):
	reply = {
		"score": 80,
		"isCorrect": True,
		"feedback": "  ",
		"codeAnalysis": {"quality": 80, "efficiency": 80, "readability": 80, "bestPractices": 80},
	}
	use_claude(json.dumps(reply))
	response = client.post("/api/interview/evaluate", json={"code": "print('hi')", "question": "Say hi"})
	body = response.json()
	assert body["metadata"]["source"] == "heuristic"
	assert body["data"]["feedback"].strip()


def test_interview_feedback_blank_feedback_falls_back(client, use_claude):
	reply = {
		"overallScore": 80,
		"interviewPerformance": {"problemSolving": 80, "communication": 80, "codingStyle": 80, "timeManagement": 80},
		"behaviorAnalysis": {"confidence": "High", "approach": "Direct", "thinkingProcess": "Clear"},
		"feedback": "",
	}
	use_claude(json.dumps(reply))
	response = client.post("/api/interview/feedback", json={"timeSpent": 30, "code": "x = 1"})
	body = response.json()
	assert body["metadata"]["source"] == "heuristic"
	assert body["data"]["feedback"]["feedback"]
