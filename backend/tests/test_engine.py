import pytest

from typerank import engine
from typerank.engine import Keystroke, Tick, update


def _type(state, text, at_ms):
    return update(state, Keystroke(text, at_ms))


def test_clock_starts_on_first_character():
    state = engine.new_test("hello world")
    assert state.status == engine.IDLE
    state = update(state, Tick(5000))
    assert state.status == engine.IDLE
    state = _type(state, "", 6000)
    assert state.status == engine.IDLE
    state = _type(state, "h", 10_000)
    assert state.status == engine.RUNNING
    assert state.start_ms == 10_000


def test_zero_elapsed_gives_zero_wpm():
    state = _type(engine.new_test("abc"), "a", 1000)
    assert state.wpm == 0
    assert state.accuracy == 100


def test_live_wpm_and_accuracy():
    state = engine.new_test("the quick brown fox")
    state = _type(state, "t", 0)
    # 10 chars = 2 words in 30 s -> 4 wpm
    state = _type(state, "thx quick ", 30_000)
    assert state.wpm == 4
    # 9 of 10 characters line up
    assert state.accuracy == 90
    assert state.elapsed_seconds == 30


def test_mismatch_does_not_shift_alignment():
    # an extra character makes every later position wrong
    assert engine.compute_accuracy("aabc", "abcd") == 25
    assert engine.compute_accuracy("", "abcd") == 100


def test_rounding_is_half_up():
    # 1 of 8 correct = 12.5% -> 13
    assert engine.compute_accuracy("axxxxxxx", "abcdefgh") == 13
    # 5 chars in 24 s = 2.5 wpm -> 3
    assert engine.compute_wpm(5, 24_000) == 3


def test_finishes_when_length_matches():
    state = _type(engine.new_test("abcde"), "a", 0)
    state = _type(state, "abcd", 6_000)
    assert state.status == engine.RUNNING
    state = _type(state, "abxde", 12_500)
    assert state.finished
    assert state.end_ms == 12_500
    assert state.elapsed_seconds == 12
    # 1 word over 12.5 s = 4.8 wpm
    assert state.wpm == 5
    assert state.accuracy == 80
    # later events do not change a finished test
    assert update(state, Keystroke("abxdef", 20_000)) is state
    assert update(state, Tick(30_000)) is state


def test_tick_only_refreshes_timer():
    state = _type(engine.new_test("abcdef"), "ab", 1_000)
    ticked = update(state, Tick(4_999))
    assert ticked.elapsed_seconds == 3
    assert ticked.wpm == state.wpm
    assert ticked.typed == state.typed


def test_backspace_is_just_a_shorter_input():
    state = _type(engine.new_test("abcdef"), "abx", 0)
    state = _type(state, "ab", 1_000)
    assert state.typed == "ab"
    assert state.accuracy == 100


def test_submission_payload():
    state = _type(engine.new_test("ab"), "a", 0)
    with pytest.raises(ValueError):
        engine.submission(state, "zoe", "easy")
    state = _type(state, "ab", 3_000)
    assert engine.submission(state, "zoe", "easy", "daily") == {
        "name": "zoe",
        "wpm": 8,
        "accuracy": 100,
        "difficulty": "easy",
        "mode": "daily",
    }


def test_empty_target_rejected():
    with pytest.raises(ValueError):
        engine.new_test("")


def test_erasing_everything_keeps_last_stats():
    state = _type(engine.new_test("abcdef"), "a", 0)
    state = _type(state, "ax", 6_000)
    assert state.accuracy == 50
    erased = _type(state, "", 9_000)
    assert erased.status == engine.RUNNING
    assert erased.typed == ""
    assert erased.accuracy == 50
    assert erased.wpm == state.wpm
    assert erased.elapsed_seconds == 9
    # the clock keeps running from the original first keystroke
    resumed = _type(erased, "ab", 12_000)
    assert resumed.start_ms == 0
    assert resumed.accuracy == 100
