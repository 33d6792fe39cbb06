from codecoach.keystrokes import KeystrokeEvent, KeystrokeRecorder, analyze_keystrokes, window_events


def ev(ts, key, action="keydown"):
	return KeystrokeEvent(timestamp=ts, key=key, action=action)


class StepClock:
	def __init__(self, now=0):
		self.now = now

	def __call__(self):
		return self.now


def test_recorder_ignores_input_until_started():
	rec = KeystrokeRecorder()
	assert rec.record("a") is None
	assert rec.events == ()
	assert rec.pending_count == 0


def test_recorder_drops_pure_modifiers():
	rec = KeystrokeRecorder(flush_interval_ms=0)
	rec.start_tracking()
	assert rec.record("Shift") is None
	assert rec.record("Meta") is None
	assert rec.record("A") is not None
	assert [e.key for e in rec.events] == ["A"]


def test_recorder_keeps_modifiers_when_asked():
	rec = KeystrokeRecorder(ignore_pure_modifiers=False, flush_interval_ms=0)
	rec.start_tracking()
	rec.record("Control")
	assert [e.key for e in rec.events] == ["Control"]


def test_recorder_coalesces_until_interval_or_stop():
	clock = StepClock(1000)
	batches = []
	rec = KeystrokeRecorder(clock=clock, on_flush=batches.append)
	rec.start_tracking()

	rec.record("a")
	clock.now = 1200
	rec.record("b")
	assert rec.events == ()
	assert rec.pending_count == 2

	clock.now = 1600
	rec.record("c")
	assert [e.key for e in rec.events] == ["a", "b", "c"]
	assert rec.pending_count == 0
	assert len(batches) == 1

	clock.now = 1700
	rec.record("d")
	rec.stop_tracking()
	assert [e.key for e in rec.events] == ["a", "b", "c", "d"]
	assert [e.key for e in batches[-1]] == ["d"]
	assert [e.timestamp for e in rec.events] == [1000, 1200, 1600, 1700]


def test_start_and_stop_are_idempotent():
	clock = StepClock(0)
	rec = KeystrokeRecorder(clock=clock)
	rec.start_tracking()
	rec.record("a")
	rec.start_tracking()
	assert rec.pending_count == 1
	rec.stop_tracking()
	rec.stop_tracking()
	assert not rec.is_tracking
	assert len(rec.events) == 1


def test_recorder_buffer_is_bounded_oldest_first():
	rec = KeystrokeRecorder(max_buffer=3, flush_interval_ms=0)
	rec.start_tracking()
	for key in "abcde":
		rec.record(key)
	assert [e.key for e in rec.events] == ["c", "d", "e"]


def test_clear_empties_both_buffers():
	clock = StepClock(0)
	rec = KeystrokeRecorder(clock=clock)
	rec.start_tracking()
	rec.record("a")
	rec.flush()
	rec.record("b")
	rec.clear()
	assert rec.events == ()
	assert rec.pending_count == 0


def test_record_keeps_supplied_timestamp():
	rec = KeystrokeRecorder(flush_interval_ms=0)
	rec.start_tracking()
	rec.record_event(ev(42, "x", "keyup"))
	assert rec.events[0] == ev(42, "x", "keyup")


def test_analyze_empty_is_all_zero():
	m = analyze_keystrokes([])
	assert m.total_keystrokes == 0
	assert m.wpm == 0
	assert m.error_rate == 0
	assert m.most_used_keys == []


def test_analyze_counts_gaps_pauses_and_speed():
	events = [ev(0, "a"), ev(100, "b"), ev(200, "a"), ev(3000, "Backspace"), ev(3050, "Enter")]
	m = analyze_keystrokes(events)

	assert m.total_keystrokes == 5
	assert m.typing_keys == 3
	assert m.backspaces == 1
	assert m.special_keys == 1
	assert m.timings == [100, 100, 2800, 50]
	assert m.average_gap_ms == 762.5
	assert m.long_pauses == 1
	assert m.rapid_bursts == 1
	assert m.elapsed_seconds == 3.05
	# 3 chars = 0.6 words over 3.05 s
	assert m.wpm == 12
	assert m.error_percent == 33
	assert m.most_used_keys[0].key == "a"
	assert m.most_used_keys[0].count == 2


def test_analyze_ignores_idle_gaps():
	m = analyze_keystrokes([ev(0, "a"), ev(15_000, "b"), ev(15_000, "c")])
	assert m.timings == []
	assert m.average_gap_ms == 0
	assert m.elapsed_seconds == 15


def test_analyze_restricts_to_trailing_window():
	events = [ev(0, "a"), ev(100_000, "b")]
	assert window_events(events, 45) == [events[1]]

	m = analyze_keystrokes(events, window_seconds=45)
	assert m.total_keystrokes == 1
	assert m.elapsed_seconds == 45
	assert m.wpm == 0


def test_analyze_zero_elapsed_has_zero_wpm():
	m = analyze_keystrokes([ev(5, "a"), ev(5, "b")])
	assert m.elapsed_seconds == 0
	assert m.wpm == 0


def test_error_rate_is_clamped():
	events = [ev(0, "a"), ev(200, "Backspace"), ev(400, "Backspace"), ev(600, "Backspace")]
	m = analyze_keystrokes(events)
	assert m.error_rate == 1.0
	assert m.error_percent == 100


def test_analyze_does_not_mutate_input():
	events = [ev(0, "a"), ev(100, "b")]
	snapshot = list(events)
	analyze_keystrokes(events)
	assert events == snapshot


def test_metrics_serialize_camel_case():
	body = analyze_keystrokes([ev(0, "a"), ev(1000, "b")]).model_dump(by_alias=True)
	assert {"totalKeystrokes", "errorRate", "mostUsedKeys", "averageGapMs", "longPauses"} <= set(body)


def test_fifty_typed_keys_with_five_corrections_over_fifteen_seconds():
	keys = (["a"] * 10 + ["Backspace"]) * 5
	stamps = [round(i * 15000 / (len(keys) - 1)) for i in range(len(keys))]
	m = analyze_keystrokes([ev(ts, k) for ts, k in zip(stamps, keys)])

	assert m.typing_keys == 50
	assert m.backspaces == 5
	assert m.elapsed_seconds == 15
	assert abs(m.error_rate - 0.10) < 1e-9
	assert m.error_percent == 10
	assert m.wpm == 40
