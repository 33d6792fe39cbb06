from __future__ import annotations
import json
import re
from typing import Any, Dict

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def extract_json_object(text: str) -> Dict[str, Any]:
	"""Extract a JSON object from LLM output.

	Tries, in order: the whole text, the first fenced block (```json or bare ```),
	then the slice between the first "{" and the last "}".

	Raises:
		ValueError: if none of the candidates parses to a JSON object
	"""
	text = (text or "").strip()
	candidates = [text]
	fenced = _FENCE_RE.search(text)
	if fenced:
		candidates.append(fenced.group(1))
	first = text.find("{")
	last = text.rfind("}")
	if first != -1 and last > first:
		candidates.append(text[first : last + 1])
	for candidate in candidates:
		try:
			data = json.loads(candidate)
		except ValueError:
			continue
		if isinstance(data, dict):
			return data
	raise ValueError("LLM did not return a valid JSON object")
