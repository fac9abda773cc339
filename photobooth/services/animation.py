"""Duration based animation timelines.

A timeline only knows how much time has elapsed since it began. Callers
advance it with the seconds elapsed between two ticks and sample values from
its progress, so completion depends on elapsed time and never on how many
ticks were delivered.
"""
from typing import Callable, NamedTuple, Optional, Sequence

Easing = Callable[[float], float]


def linear(t: float) -> float:
    return t


def quad_in(t: float) -> float:
    return t * t


def quad_out(t: float) -> float:
    return t * (2.0 - t)


def quad_in_out(t: float) -> float:
    if t < 0.5:
        return 2.0 * t * t
    return -1.0 + (4.0 - 2.0 * t) * t


def bounce_out(t: float) -> float:
    if t < 1 / 2.75:
        return 7.5625 * t * t
    if t < 2 / 2.75:
        t -= 1.5 / 2.75
        return 7.5625 * t * t + 0.75
    if t < 2.5 / 2.75:
        t -= 2.25 / 2.75
        return 7.5625 * t * t + 0.9375
    t -= 2.625 / 2.75
    return 7.5625 * t * t + 0.984375


class KeyFrame(NamedTuple):
    """Value reached at ``at`` (a fraction of the timeline), eased from the previous key frame."""
    at: float
    value: float
    easing: Easing = linear


def sample(keyframes: Sequence[KeyFrame], progress: float) -> float:
    if not keyframes:
        return 0.0
    if progress <= keyframes[0].at:
        return keyframes[0].value
    if progress >= keyframes[-1].at:
        return keyframes[-1].value
    for previous, current in zip(keyframes, keyframes[1:]):
        if progress <= current.at:
            span = current.at - previous.at
            local = 1.0 if span <= 0 else (progress - previous.at) / span
            return previous.value + (current.value - previous.value) * current.easing(local)
    return keyframes[-1].value


class Timeline:
    def __init__(self, duration: float, keyframes: Optional[Sequence[KeyFrame]] = None):
        if duration < 0:
            raise ValueError("duration must not be negative")
        self.duration = duration
        self.keyframes = list(keyframes) if keyframes else [KeyFrame(0.0, 0.0), KeyFrame(1.0, 1.0)]
        self.elapsed = 0.0
        self._running = False
        self._completed = False

    @classmethod
    def tween(cls, duration: float, start: float, end: float, easing: Easing = linear) -> "Timeline":
        return cls(duration, [KeyFrame(0.0, start), KeyFrame(1.0, end, easing)])

    def begin(self) -> None:
        self.elapsed = 0.0
        self._running = True
        self._completed = False

    def reset(self) -> None:
        self.elapsed = 0.0
        self._running = False
        self._completed = False

    def advance(self, dt: float) -> None:
        if not self._running:
            return
        self.elapsed += max(dt, 0.0)
        if self.elapsed >= self.duration:
            self.elapsed = self.duration
            self._running = False
            self._completed = True

    @property
    def progress(self) -> float:
        if self._completed:
            return 1.0
        if self.duration == 0:
            return 0.0
        return min(self.elapsed / self.duration, 1.0)

    @property
    def value(self) -> float:
        return sample(self.keyframes, self.progress)

    def sample(self, keyframes: Sequence[KeyFrame]) -> float:
        return sample(keyframes, self.progress)

    @property
    def is_animating(self) -> bool:
        return self._running

    @property
    def is_completed(self) -> bool:
        return self._completed
