"""Animation descriptions: identifiers, playback parameters and the Animation itself."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional

DEFAULT_FRAME_DURATION_MS = 100


@dataclass(frozen=True, order=True)
class AnimationId:
    """Opaque identifier of an animation registered in a library."""

    value: int

    def __str__(self) -> str:
        return f"animation{self.value}"


@dataclass(frozen=True, order=True)
class ClipId:
    """Opaque identifier of a clip registered in a library."""

    value: int


@dataclass(frozen=True, order=True)
class MarkerId:
    """Opaque identifier of an animation marker."""

    value: int


def _check_non_negative(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")


@dataclass(frozen=True)
class AnimationDuration:
    """Duration of an animation, either per frame or per repetition, in milliseconds.

    The default is 100 ms per frame.
    """

    milliseconds: int = DEFAULT_FRAME_DURATION_MS
    per_repetition_mode: bool = False

    def __post_init__(self) -> None:
        _check_non_negative("milliseconds", self.milliseconds)

    @classmethod
    def per_frame(cls, milliseconds: int) -> AnimationDuration:
        """Each frame lasts the given number of milliseconds."""
        return cls(milliseconds, per_repetition_mode=False)

    @classmethod
    def per_repetition(cls, milliseconds: int) -> AnimationDuration:
        """One full repetition lasts the given number of milliseconds."""
        return cls(milliseconds, per_repetition_mode=True)

    def __repr__(self) -> str:
        kind = "PerRepetition" if self.per_repetition_mode else "PerFrame"
        return f"{kind}({self.milliseconds})"


@dataclass(frozen=True)
class AnimationRepeat:
    """How many times an animation repeats; ``count`` of None means looping forever."""

    count: Optional[int] = None

    def __post_init__(self) -> None:
        if self.count is not None:
            _check_non_negative("count", self.count)

    @classmethod
    def loop(cls) -> AnimationRepeat:
        """Repeat indefinitely."""
        return cls(None)

    @classmethod
    def times(cls, count: int) -> AnimationRepeat:
        """Repeat a fixed number of times."""
        return cls(count)

    @property
    def is_loop(self) -> bool:
        return self.count is None

    def __repr__(self) -> str:
        return "Loop" if self.count is None else f"Times({self.count})"


class AnimationDirection(Enum):
    """Order in which the frames of an animation play."""

    FORWARDS = "forwards"
    BACKWARDS = "backwards"
    PING_PONG = "ping_pong"

    @classmethod
    def default(cls) -> AnimationDirection:
        return cls.FORWARDS


@dataclass(frozen=True)
class AnimationProgress:
    """Position within an animation: frame index and repetition index."""

    frame: int = 0
    repetition: int = 0

    def __post_init__(self) -> None:
        _check_non_negative("frame", self.frame)
        _check_non_negative("repetition", self.repetition)


@dataclass
class Animation:
    """A playable animation composed of one or several clips.

    Optional parameters, when set, are combined with those of the clips.
    """

    clip_ids: tuple[ClipId, ...] = field(default_factory=tuple)
    duration: Optional[AnimationDuration] = None
    repetitions: Optional[AnimationRepeat] = None
    direction: Optional[AnimationDirection] = None
    easing: Optional[Any] = None

    def __post_init__(self) -> None:
        self.clip_ids = tuple(self.clip_ids)

    @classmethod
    def from_clip(cls, clip_id: ClipId) -> Animation:
        """Create an animation from a single clip."""
        return cls(clip_ids=(clip_id,))

    @classmethod
    def from_clips(cls, clip_ids: Iterable[ClipId]) -> Animation:
        """Create an animation from a sequence of clips."""
        return cls(clip_ids=tuple(clip_ids))

    def with_duration(self, duration: AnimationDuration) -> Animation:
        """Return a copy with the given duration."""
        if not isinstance(duration, AnimationDuration):
            raise TypeError(f"expected an AnimationDuration, got {duration!r}")
        return replace(self, duration=duration)

    def with_repetitions(self, repetitions: AnimationRepeat) -> Animation:
        """Return a copy with the given repetitions."""
        if not isinstance(repetitions, AnimationRepeat):
            raise TypeError(f"expected an AnimationRepeat, got {repetitions!r}")
        return replace(self, repetitions=repetitions)

    def with_direction(self, direction: AnimationDirection) -> Animation:
        """Return a copy with the given direction."""
        if not isinstance(direction, AnimationDirection):
            raise TypeError(f"expected an AnimationDirection, got {direction!r}")
        return replace(self, direction=direction)

    def with_easing(self, easing: Any) -> Animation:
        """Return a copy with the given easing."""
        return replace(self, easing=easing)