from __future__ import annotations
import asyncio
import logging
import httpx
from typing import Any, Awaitable, Callable, Dict, List, Optional
from .settings import settings

logger = logging.getLogger(__name__)

# Statuses worth another attempt; any other 4xx is a caller error and fails fast
RETRYABLE_STATUSES = {408, 409, 429, 500, 502, 503, 504, 529}


class ClaudeAPIError(RuntimeError):
	def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
		super().__init__(message)
		self.status_code = status_code

	@property
	def rate_limited(self) -> bool:
		return self.status_code == 429


class ClaudeClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		max_attempts: Optional[int] = None,
		retry_base_delay: Optional[float] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
		sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
	) -> None:
		self.api_key = api_key or settings.anthropic_api_key
		if not self.api_key:
			raise ValueError("ANTHROPIC_API_KEY is not configured")
		self.model = model or settings.anthropic_model
		self.base_url = base_url or settings.anthropic_base_url
		self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.llm_max_attempts)
		self.retry_base_delay = settings.llm_retry_base_delay if retry_base_delay is None else retry_base_delay
		self._headers = {
			"content-type": "application/json",
			"x-api-key": self.api_key,
			"anthropic-version": settings.anthropic_version,
		}
		self._sleep = sleep
		self._client = httpx.AsyncClient(timeout=timeout or settings.llm_timeout_seconds, transport=transport)

	async def generate(
		self,
		prompt: str,
		*,
		system: Optional[str] = None,
		max_tokens: int = 1000,
		temperature: Optional[float] = None,
	) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"max_tokens": max_tokens,
			"messages": [{"role": "user", "content": prompt}],
		}
		if system:
			payload["system"] = system
		if temperature is not None:
			payload["temperature"] = temperature
		data = await self._post_payload(payload)
		return self._extract_text(data)

	async def _post_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		last_error: Optional[ClaudeAPIError] = None
		for attempt in range(self.max_attempts):
			try:
				r = await self._client.post(self.base_url, headers=self._headers, json=payload)
				r.raise_for_status()
				return r.json()
			except httpx.HTTPStatusError as http_err:
				status = http_err.response.status_code
				last_error = ClaudeAPIError(
					f"Claude HTTP {status}: {http_err.response.text[:500]}",
					status_code=status,
				)
				if status not in RETRYABLE_STATUSES:
					raise last_error from http_err
			except httpx.RequestError as net_err:
				last_error = ClaudeAPIError(f"Claude request failed: {net_err}")
			except ValueError as decode_err:
				# 2xx with a body that is not JSON
				raise ClaudeAPIError(f"Unexpected Claude response: {decode_err}") from decode_err
			logger.warning("Claude attempt %d/%d failed: %s", attempt + 1, self.max_attempts, last_error)
			if attempt + 1 < self.max_attempts:
				await self._sleep(self.retry_base_delay * (2 ** attempt))
		raise last_error or ClaudeAPIError("Claude call failed")

	@staticmethod
	def _extract_text(data: Any) -> str:
		if not isinstance(data, dict):
			raise ClaudeAPIError(f"Unexpected Claude response: {data!r}"[:500])
		blocks: List[Any] = data.get("content") or []
		if not isinstance(blocks, list):
			raise ClaudeAPIError(f"Unexpected Claude response: {data!r}"[:500])
		parts = [str(b.get("text", "")) for b in blocks if isinstance(b, dict) and b.get("type", "text") == "text"]
		return "".join(parts).strip()

	async def aclose(self) -> None:
		await self._client.aclose()


ClientFactory = Callable[[], ClaudeClient]


def get_claude_factory() -> ClientFactory:
	return ClaudeClient


async def complete(factory: ClientFactory, prompt: str, **kwargs: Any) -> str:
	"""Run one ``generate`` call on a fresh client and always close it."""
	client = factory()
	try:
		return await client.generate(prompt, **kwargs)
	finally:
		await client.aclose()
