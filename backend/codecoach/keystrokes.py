"""
Keystroke capture and behavioural metrics.

The recorder collects key transitions for one coding session; the analyzer
reduces a trailing window of those events into typing statistics (speed,
corrections, pause structure) that feed coaching prompts and the heuristic
evaluator.
"""

from __future__ import annotations

import time
from collections import Counter, deque
from typing import Callable, Deque, Iterable, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MODIFIERS = frozenset({"Shift", "Alt", "Control", "Meta"})
NAVIGATION_KEYS = frozenset({"Tab", "Enter", "ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight"})

# Gaps outside (0, MAX_GAP_MS) are idle time or clock noise, not typing rhythm
MAX_GAP_MS = 10_000
TOP_KEYS = 5


class KeystrokeEvent(BaseModel):
	model_config = ConfigDict(frozen=True)

	timestamp: int
	key: str
	action: Literal["keydown", "keyup"] = "keydown"
	code: str = ""


class KeyCount(BaseModel):
	key: str
	count: int


class KeystrokeMetrics(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	total_keystrokes: int = 0
	typing_keys: int = 0
	backspaces: int = 0
	special_keys: int = 0
	timings: List[int] = Field(default_factory=list)
	average_gap_ms: float = 0.0
	long_pauses: int = 0
	rapid_bursts: int = 0
	elapsed_seconds: float = 0.0
	wpm: int = 0
	error_rate: float = 0.0
	error_percent: int = 0
	most_used_keys: List[KeyCount] = Field(default_factory=list)

	def most_used_summary(self) -> str:
		return ", ".join(f"{k.key}({k.count})" for k in self.most_used_keys) or "none"


def _now_ms() -> int:
	return int(time.time() * 1000)


class KeystrokeRecorder:
	"""Rolling, session-owned buffer of key transitions.

	Events are staged in a pending buffer and moved to the visible collection
	at most once per ``flush_interval_ms`` so consumers are not updated on
	every key. ``on_flush`` receives each flushed batch.
	"""

	def __init__(
		self,
		*,
		max_buffer: int = 2000,
		ignore_pure_modifiers: bool = True,
		flush_interval_ms: int = 500,
		clock: Callable[[], int] = _now_ms,
		on_flush: Optional[Callable[[Tuple[KeystrokeEvent, ...]], None]] = None,
	) -> None:
		self.max_buffer = max(1, max_buffer)
		self.ignore_pure_modifiers = ignore_pure_modifiers
		self.flush_interval_ms = flush_interval_ms
		self._clock = clock
		self._on_flush = on_flush
		self._pending: Deque[KeystrokeEvent] = deque(maxlen=self.max_buffer)
		self._events: Deque[KeystrokeEvent] = deque(maxlen=self.max_buffer)
		self._tracking = False
		self._last_flush_ms: Optional[int] = None

	@property
	def is_tracking(self) -> bool:
		return self._tracking

	@property
	def events(self) -> Tuple[KeystrokeEvent, ...]:
		return tuple(self._events)

	@property
	def pending_count(self) -> int:
		return len(self._pending)

	def start_tracking(self) -> None:
		if self._tracking:
			return
		self._tracking = True
		self._last_flush_ms = self._clock()

	def stop_tracking(self) -> None:
		if not self._tracking:
			return
		self._tracking = False
		self.flush()

	def record(
		self,
		key: str,
		action: Literal["keydown", "keyup"] = "keydown",
		code: str = "",
		timestamp: Optional[int] = None,
	) -> Optional[KeystrokeEvent]:
		if not self._tracking:
			return None
		if self.ignore_pure_modifiers and key in MODIFIERS:
			return None
		now = self._clock()
		event = KeystrokeEvent(
			timestamp=now if timestamp is None else timestamp,
			key=key,
			action=action,
			code=code or "",
		)
		self._pending.append(event)
		if self._last_flush_ms is None or now - self._last_flush_ms >= self.flush_interval_ms:
			self.flush()
		return event

	def record_event(self, event: KeystrokeEvent) -> Optional[KeystrokeEvent]:
		return self.record(event.key, event.action, event.code, event.timestamp)

	def flush(self) -> int:
		self._last_flush_ms = self._clock()
		if not self._pending:
			return 0
		batch = tuple(self._pending)
		self._pending.clear()
		self._events.extend(batch)
		if self._on_flush is not None:
			self._on_flush(batch)
		return len(batch)

	def clear(self) -> None:
		self._pending.clear()
		self._events.clear()


def window_events(events: Sequence[KeystrokeEvent], window_seconds: float) -> List[KeystrokeEvent]:
	"""Return the events within ``window_seconds`` of the most recent one."""
	if not events:
		return []
	cutoff = events[-1].timestamp - window_seconds * 1000
	return [e for e in events if e.timestamp >= cutoff]


def _gaps(events: Sequence[KeystrokeEvent]) -> List[int]:
	gaps = []
	for prev, cur in zip(events, events[1:]):
		delta = cur.timestamp - prev.timestamp
		if 0 < delta < MAX_GAP_MS:
			gaps.append(delta)
	return gaps


def analyze_keystrokes(
	events: Iterable[KeystrokeEvent],
	*,
	window_seconds: float = 45.0,
	pause_threshold_ms: int = 2000,
	burst_threshold_ms: int = 100,
) -> KeystrokeMetrics:
	ordered = window_events(list(events), window_seconds)
	if not ordered:
		return KeystrokeMetrics()

	typing = [e for e in ordered if len(e.key) == 1]
	backspaces = sum(1 for e in ordered if e.key == "Backspace")
	special = sum(1 for e in ordered if e.key in NAVIGATION_KEYS)

	gaps = _gaps(ordered)
	average_gap = sum(gaps) / len(gaps) if gaps else 0.0
	long_pauses = sum(1 for g in gaps if g > pause_threshold_ms)
	rapid_bursts = sum(1 for g in gaps if g < burst_threshold_ms)

	if len(ordered) > 1:
		elapsed = max(0.0, (ordered[-1].timestamp - ordered[0].timestamp) / 1000)
		wpm = max(0, round(len(typing) / 5 / (elapsed / 60))) if elapsed > 0 else 0
		error_rate = backspaces / len(typing) if typing else 0.0
	else:
		elapsed = float(window_seconds)
		wpm = 0
		error_rate = 0.0
	error_rate = max(0.0, min(1.0, error_rate))

	frequency = Counter(e.key.lower() for e in typing)
	most_used = [KeyCount(key=k, count=c) for k, c in frequency.most_common(TOP_KEYS)]

	return KeystrokeMetrics(
		total_keystrokes=len(ordered),
		typing_keys=len(typing),
		backspaces=backspaces,
		special_keys=special,
		timings=gaps,
		average_gap_ms=average_gap,
		long_pauses=long_pauses,
		rapid_bursts=rapid_bursts,
		elapsed_seconds=elapsed,
		wpm=wpm,
		error_rate=error_rate,
		error_percent=max(0, min(100, round(error_rate * 100))),
		most_used_keys=most_used,
	)
