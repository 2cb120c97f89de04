import pytest

from gravity_synth.recorder import RecordedEvent, Recorder, RecorderMode


class Replays:
    def __init__(self):
        self.calls = []

    def __call__(self, event, offset):
        self.calls.append((event.key_index, offset))

    @property
    def keys(self):
        return [key for key, _ in self.calls]


@pytest.fixture()
def replays():
    return Replays()


@pytest.fixture()
def recorder(scheduler, params, replays):
    return Recorder(scheduler, params, on_replay=replays, min_delay_ms=50)


def _record(recorder, scheduler, takes):
    """Record (key, at_ms) pairs, advancing the fake clock between presses."""
    recorder.toggle()
    start = scheduler.now()
    for key, at in takes:
        scheduler.advance(start + at - scheduler.now())
        recorder.capture(key)


def test_record_button_cycles_modes(recorder):
    assert recorder.mode is RecorderMode.IDLE
    assert recorder.toggle() is RecorderMode.RECORDING
    assert recorder.toggle() is RecorderMode.PLAYING
    assert recorder.toggle() is RecorderMode.RECORDING
    assert recorder.toggle() is RecorderMode.PLAYING


def test_capture_only_while_recording(recorder, scheduler):
    assert recorder.capture(3) is None
    recorder.toggle()
    scheduler.advance(120)
    assert recorder.capture(3) == RecordedEvent(key_index=3, timestamp=120)
    recorder.toggle()
    assert recorder.capture(9) is None
    assert recorder.events == (RecordedEvent(3, 120),)


def test_buffer_is_append_only_then_cleared_on_new_take(recorder, scheduler):
    recorder.toggle()
    previous = ()
    for key in [1, 5, 5, 20]:
        scheduler.advance(10)
        recorder.capture(key)
        assert recorder.events[: len(previous)] == previous
        assert len(recorder.events) == len(previous) + 1
        previous = recorder.events

    recorder.toggle()
    assert [e.key_index for e in recorder.events] == [1, 5, 5, 20]
    recorder.toggle()
    assert recorder.events == ()


def test_playback_loops_with_scaled_gaps(recorder, scheduler, params, replays):
    _record(recorder, scheduler, [(3, 0), (7, 500)])
    params.set("note_speed", 0)  # speed factor 1.5
    recorder.toggle()

    scheduler.advance(0)
    assert replays.keys == [3]
    scheduler.advance(749)
    assert replays.keys == [3]
    scheduler.advance(1)
    assert replays.keys == [3, 7]
    scheduler.advance(750)
    assert replays.keys == [3, 7, 3]
    scheduler.advance(750 * 4)
    assert replays.keys == [3, 7, 3, 7, 3, 7, 3]
    assert [offset for _, offset in replays.calls[:2]] == [0, 500]


def test_delay_uses_speed_factor_at_scheduling_time(recorder, scheduler, params, replays):
    _record(recorder, scheduler, [(1, 0), (2, 100), (3, 400)])
    params.set("note_speed", 127)  # speed factor 0.5
    recorder.toggle()
    scheduler.advance(0)
    assert scheduler.requested_delays[-1] == pytest.approx(50)

    params.set("note_speed", 0)
    scheduler.advance(50)
    assert replays.keys == [1, 2]
    assert scheduler.requested_delays[-1] == pytest.approx(300 * 1.5)


def test_wrap_reuses_last_gap(recorder, scheduler, params):
    _record(recorder, scheduler, [(1, 0), (2, 100), (3, 400)])
    params.set("note_speed", 63.5)  # speed factor 1.0
    recorder.toggle()
    assert recorder.next_delay(1) == pytest.approx(100)
    assert recorder.next_delay(2) == pytest.approx(300)
    assert recorder.next_delay(0) == pytest.approx(300)


def test_empty_take_plays_nothing(recorder, scheduler, replays):
    recorder.toggle()
    recorder.toggle()
    assert recorder.mode is RecorderMode.PLAYING
    assert scheduler.pending == 0
    scheduler.advance(10_000)
    assert replays.calls == []


def test_single_event_take_does_not_spin(recorder, scheduler, replays):
    _record(recorder, scheduler, [(11, 0)])
    recorder.toggle()

    scheduler.advance(0)
    assert replays.keys == [11]
    assert scheduler.requested_delays[-1] == 50
    scheduler.advance(49)
    assert replays.keys == [11]
    scheduler.advance(1)
    assert replays.keys == [11, 11]


def test_simultaneous_events_do_not_fire_in_same_turn(recorder, scheduler, replays):
    _record(recorder, scheduler, [(1, 0), (2, 0), (3, 0)])
    recorder.toggle()
    scheduler.advance(0)
    assert replays.keys == [1]
    assert all(delay > 0 for delay in scheduler.requested_delays[1:])


def test_stop_while_timer_in_flight_silences_playback(recorder, scheduler, replays):
    _record(recorder, scheduler, [(3, 0), (7, 500)])
    recorder.toggle()
    scheduler.advance(0)
    assert replays.keys == [3]

    recorder.stop()
    scheduler.advance(5_000)
    assert replays.keys == [3]
    assert recorder.mode is RecorderMode.IDLE


def test_new_take_stops_playback(recorder, scheduler, replays):
    _record(recorder, scheduler, [(3, 0), (7, 500)])
    recorder.toggle()
    scheduler.advance(0)

    recorder.toggle()
    assert recorder.mode is RecorderMode.RECORDING
    scheduler.advance(5_000)
    assert replays.keys == [3]


def test_stale_callbacks_from_previous_session_are_ignored(sticky_scheduler, params, replays):
    scheduler = sticky_scheduler
    recorder = Recorder(scheduler, params, on_replay=replays, min_delay_ms=50)
    params.set("note_speed", 63.5)
    _record(recorder, scheduler, [(3, 0), (7, 500)])
    recorder.toggle()
    scheduler.advance(0)  # fires 3, schedules 7 at +500

    # Leave Playing and come straight back with a new take.
    recorder.toggle()
    recorder.capture(20)
    recorder.toggle()

    scheduler.advance(0)
    assert replays.keys == [3, 20]
    scheduler.advance(500)  # the old chain's timer falls due here
    assert replays.keys.count(7) == 0
