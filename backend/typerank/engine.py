"""Client-side typing engine.

A test is an explicit finite state machine, ``idle -> running -> finished``.
All state lives in an immutable `TypingState`; the only way to change it
is `update(state, event)`, which returns a new state.

Speed and accuracy follow the usual conventions:

* **WPM** = (characters typed / 5) / elapsed minutes, 0 while no time has
  elapsed.
* **Accuracy** = share of typed characters equal to the target character
  at the same index. A mistake does not shift the alignment of later
  characters.

Both values are rounded half-up. Times are wall-clock milliseconds
supplied by the caller, so ticks never influence the results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Union

IDLE = "idle"
RUNNING = "running"
FINISHED = "finished"

CHARS_PER_WORD = 5


@dataclass(frozen=True)
class Keystroke:
    """The full input value after a key press, at wall-clock `at_ms`."""

    text: str
    at_ms: int


@dataclass(frozen=True)
class Tick:
    """Periodic display tick; only refreshes the visible timer."""

    at_ms: int


Event = Union[Keystroke, Tick]


@dataclass(frozen=True)
class TypingState:
    target: str
    status: str = IDLE
    typed: str = ""
    start_ms: Optional[int] = None
    end_ms: Optional[int] = None
    wpm: int = 0
    accuracy: int = 100
    elapsed_seconds: int = 0

    @property
    def finished(self) -> bool:
        return self.status == FINISHED


def new_test(target: str) -> TypingState:
    if not target:
        raise ValueError("target paragraph must not be empty")
    return TypingState(target=target)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_wpm(typed_length: int, elapsed_ms: int) -> int:
    """Words per minute for `typed_length` characters over `elapsed_ms`."""
    if elapsed_ms <= 0:
        return 0
    # (chars / 5) / (ms / 60000) as a single division
    return _round_half_up(typed_length * 60000 / (CHARS_PER_WORD * elapsed_ms))


def compute_accuracy(typed: str, target: str) -> int:
    """Percentage of `typed` characters matching `target` index by index."""
    if not typed:
        return 100
    correct = sum(1 for i, ch in enumerate(typed) if i < len(target) and ch == target[i])
    return _round_half_up(correct * 100 / len(typed))


def update(state: TypingState, event: Event) -> TypingState:
    """Apply one event and return the resulting state."""
    if state.status == FINISHED:
        return state

    if isinstance(event, Tick):
        if state.status != RUNNING:
            return state
        return replace(state, elapsed_seconds=max(0, (event.at_ms - state.start_ms) // 1000))

    typed = event.text[:len(state.target)]
    if state.status == IDLE:
        if not typed:
            return state
        # the clock starts at the first typed character, not when the test is shown
        state = replace(state, status=RUNNING, start_ms=event.at_ms)

    elapsed_ms = event.at_ms - state.start_ms
    if not typed:
        # input erased: keep the last speed and accuracy until something is typed again
        return replace(state, typed=typed, elapsed_seconds=max(0, elapsed_ms // 1000))
    state = replace(
        state,
        typed=typed,
        wpm=compute_wpm(len(typed), elapsed_ms),
        accuracy=compute_accuracy(typed, state.target),
        elapsed_seconds=max(0, elapsed_ms // 1000),
    )
    if len(typed) == len(state.target):
        state = replace(state, status=FINISHED, end_ms=event.at_ms)
    return state


def submission(state: TypingState, name: str, difficulty: str, mode: str = "normal") -> dict:
    """Build the score payload for a finished test."""
    if not state.finished:
        raise ValueError("test is not finished")
    return {
        "name": name,
        "wpm": state.wpm,
        "accuracy": state.accuracy,
        "difficulty": difficulty,
        "mode": mode,
    }
