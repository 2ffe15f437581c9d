"""
Typing simulation.

Literal text is inserted one character at a time with a short randomized
pause after each character, so that it looks typed live. The pause is
floor/1000 + uniform(0, ceiling)/1000 seconds for the active
TypingProfile; the instant profile never pauses.

The Pacer holds the sleep function and random source, so tests can pass a
zero-delay sleep and a seeded Random and assert exact typing order without
wall-clock cost.
"""

import random
import time
from collections.abc import Callable

from demoreel.schema import TypingProfile


class Pacer:
    """Delay strategy for the typing simulation."""

    def __init__(
        self,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.sleep = sleep
        self.rng = rng or random.Random()

    def delay_for(self, profile: TypingProfile) -> float:
        """Seconds to wait after one character, 0.0 for instant profiles."""
        if profile.instant:
            return 0.0
        return profile.floor_ms / 1000 + self.rng.uniform(0, profile.ceiling_ms) / 1000

    def pause(self, profile: TypingProfile) -> None:
        if profile.instant:
            return
        self.sleep(self.delay_for(profile))


def type_text(
    text: str,
    emit: Callable[[str], None],
    profile: TypingProfile,
    pacer: Pacer,
) -> None:
    """Emit text one character at a time, pausing after each character."""
    for char in text:
        emit(char)
        pacer.pause(profile)
