"""Pre-computed frames of an animation, ready to be played back."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Optional, Sequence, Union

from .animation import (
    Animation,
    AnimationDirection,
    AnimationDuration,
    AnimationRepeat,
    ClipId,
    MarkerId,
)

logger = logging.getLogger(__name__)

EasingFunction = Callable[[float], float]


@dataclass(frozen=True)
class ClipSettings:
    """A clip: a sequence of atlas indices with optional playback parameters.

    ``markers`` maps a frame index within the clip to the markers hit on that frame.
    ``easing`` is None for linear timing, or a function (or an object with a
    ``get`` method) that maps normalized time in [0, 1] to eased time.
    """

    frames: tuple[int, ...] = ()
    duration: Optional[AnimationDuration] = None
    repetitions: Optional[int] = None
    direction: Optional[AnimationDirection] = None
    easing: Optional[Any] = None
    markers: Mapping[int, Sequence[MarkerId]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frames = tuple(self.frames)
        for index in frames:
            if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                raise ValueError(f"atlas indices must be non-negative integers, got {index!r}")
        if self.repetitions is not None and (
            isinstance(self.repetitions, bool)
            or not isinstance(self.repetitions, int)
            or self.repetitions < 0
        ):
            raise ValueError(f"repetitions must be a non-negative integer, got {self.repetitions!r}")
        markers = {int(frame): tuple(ids) for frame, ids in dict(self.markers).items()}
        object.__setattr__(self, "frames", frames)
        object.__setattr__(self, "markers", markers)


@dataclass(frozen=True)
class CacheMarkerHit:
    """A marker placed on a frame was hit."""

    marker_id: MarkerId
    clip_id: ClipId
    clip_repetition: int


@dataclass(frozen=True)
class CacheClipRepetitionEnd:
    """A repetition of a clip ended."""

    clip_id: ClipId
    clip_repetition: int


@dataclass(frozen=True)
class CacheClipEnd:
    """A clip ended."""

    clip_id: ClipId


CacheEvent = Union[CacheMarkerHit, CacheClipRepetitionEnd, CacheClipEnd]


@dataclass(frozen=True)
class CacheFrame:
    """One frame of animation; ``duration`` is in milliseconds."""

    atlas_index: int
    duration: int
    clip_id: ClipId
    clip_repetition: int
    events: tuple[CacheEvent, ...] = ()


def _easing_function(easing: Any) -> Optional[EasingFunction]:
    if easing is None:
        return None
    get = getattr(easing, "get", None)
    if callable(get):
        return get
    if callable(easing):
        return easing
    raise TypeError(f"unsupported easing {easing!r}")


def _to_milliseconds(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    return int(value)


def apply_easing(durations: Iterable[int], easing: Any) -> list[int]:
    """Return frame durations (in milliseconds) redistributed by an easing.

    A None easing is linear and leaves the durations unchanged.
    """
    durations = list(durations)
    function = _easing_function(easing)
    if function is None:
        return durations

    total = sum(durations)
    if total == 0:
        logger.warning("zero duration, cannot apply easing")
        return durations

    eased_durations = []
    accumulated = 0
    previous_eased_time = 0.0
    for duration in durations:
        eased_time = function(accumulated / total) * total
        eased_durations.append(_to_milliseconds(eased_time - previous_eased_time))
        accumulated += duration
        previous_eased_time = eased_time
    return eased_durations


@dataclass(frozen=True)
class _ClipData:
    id: ClipId
    settings: ClipSettings
    duration: AnimationDuration
    repetitions: int
    direction: AnimationDirection
    easing: Any
    total_ms: int

    @classmethod
    def of(cls, clip_id: ClipId, clips: Mapping[ClipId, ClipSettings]) -> _ClipData:
        try:
            settings = clips[clip_id]
        except KeyError:
            raise KeyError(f"unknown clip {clip_id!r}") from None

        duration = settings.duration or AnimationDuration()
        repetitions = 1 if settings.repetitions is None else settings.repetitions
        direction = settings.direction or AnimationDirection.default()
        frame_count = len(settings.frames)

        if direction is AnimationDirection.PING_PONG:
            frames_with_repetitions = max(frame_count - 1, 0) * repetitions + 1
        else:
            frames_with_repetitions = frame_count * repetitions

        if duration.per_repetition_mode:
            total_ms = duration.milliseconds
        else:
            total_ms = duration.milliseconds * frames_with_repetitions

        return cls(clip_id, settings, duration, repetitions, direction, settings.easing, total_ms)


class _Frame(NamedTuple):
    atlas_index: int
    duration: int
    markers: tuple[MarkerId, ...]


@dataclass(frozen=True)
class _ClipFrames:
    data: _ClipData
    repetitions: tuple[tuple[_Frame, ...], ...]

    def backwards(self) -> _ClipFrames:
        return _ClipFrames(
            self.data,
            tuple(tuple(reversed(rep)) for rep in reversed(self.repetitions)),
        )


def _corrected_frame_duration(
    data: _ClipData, animation_duration: Optional[AnimationDuration], animation_total_ms: int
) -> int:
    if animation_duration is None:
        duration = data.duration
    elif not animation_duration.per_repetition_mode:
        duration = animation_duration
    else:
        ratio = data.total_ms / animation_total_ms
        duration = AnimationDuration.per_repetition(
            _to_milliseconds(animation_duration.milliseconds * ratio / data.repetitions)
        )

    if duration.per_repetition_mode:
        return duration.milliseconds // len(data.settings.frames)
    return duration.milliseconds


def _clip_frames(data: _ClipData, frame_duration_ms: int) -> _ClipFrames:
    reference = tuple(
        _Frame(atlas_index, frame_duration_ms, data.settings.markers.get(index, ()))
        for index, atlas_index in enumerate(data.settings.frames)
        if frame_duration_ms > 0
    )

    def repetition(index: int) -> tuple[_Frame, ...]:
        if data.direction is AnimationDirection.FORWARDS:
            return reference
        if data.direction is AnimationDirection.BACKWARDS:
            return tuple(reversed(reference))
        if index == 0:
            return reference
        if index % 2 == 0:
            return reference[1:]
        return tuple(reversed(reference))[1:]

    repetitions = (repetition(index) for index in range(data.repetitions))
    return _ClipFrames(data, tuple(rep for rep in repetitions if rep))


def _backwards(clips: Sequence[_ClipFrames]) -> list[_ClipFrames]:
    return [clip.backwards() for clip in reversed(clips)]


def _merge(clips: Sequence[_ClipFrames], easing: Any) -> tuple[CacheFrame, ...]:
    pending: list[tuple[int, int, ClipId, int, list[CacheEvent]]] = []
    previous_clip: Optional[ClipId] = None
    previous_repetition: Optional[tuple[ClipId, int]] = None

    for clip in clips:
        clip_id = clip.data.id
        clip_start = len(pending)

        for rep_index, rep in enumerate(clip.repetitions):
            durations = apply_easing((frame.duration for frame in rep), clip.data.easing)
            rep_start = len(pending)
            for frame, duration in zip(rep, durations):
                events: list[CacheEvent] = [
                    CacheMarkerHit(marker, clip_id, rep_index) for marker in frame.markers
                ]
                pending.append((frame.atlas_index, duration, clip_id, rep_index, events))

            if previous_repetition is not None:
                pending[rep_start][4].append(CacheClipRepetitionEnd(*previous_repetition))
            previous_repetition = (clip_id, rep_index)

        if previous_clip is not None:
            pending[clip_start][4].append(CacheClipEnd(previous_clip))
        previous_clip = clip_id

    durations = apply_easing((entry[1] for entry in pending), easing)
    return tuple(
        CacheFrame(atlas_index, duration, clip_id, clip_repetition, tuple(events))
        for (atlas_index, _, clip_id, clip_repetition, events), duration in zip(pending, durations)
    )


@dataclass(frozen=True)
class AnimationCache:
    """All the frames of one repetition of an animation.

    ``frames_pong`` holds the frames of odd repetitions for ping-pong animations.
    ``repetitions`` is None when the animation loops forever.
    """

    frames: tuple[CacheFrame, ...] = ()
    frames_pong: Optional[tuple[CacheFrame, ...]] = None
    repetitions: Optional[int] = None
    animation_direction: AnimationDirection = AnimationDirection.FORWARDS

    @classmethod
    def build(cls, animation: Animation, clips: Mapping[ClipId, ClipSettings]) -> AnimationCache:
        """Compute the cache of an animation whose clips are looked up in ``clips``."""
        repeat = animation.repetitions or AnimationRepeat.loop()
        if repeat.count == 0:
            return cls()

        clip_data = [_ClipData.of(clip_id, clips) for clip_id in animation.clip_ids]
        clip_data = [
            data
            for data in clip_data
            if data.settings.frames and data.repetitions > 0 and data.total_ms > 0
        ]

        total_ms = sum(data.total_ms for data in clip_data)
        if total_ms == 0:
            return cls()

        clip_frames = [
            _clip_frames(data, _corrected_frame_duration(data, animation.duration, total_ms))
            for data in clip_data
        ]
        clip_frames = [clip for clip in clip_frames if clip.repetitions]

        direction = animation.direction or AnimationDirection.default()
        pong: Optional[list[_ClipFrames]] = None
        if direction is AnimationDirection.BACKWARDS:
            main = _backwards(clip_frames)
        else:
            main = clip_frames
            if direction is AnimationDirection.PING_PONG:
                pong = _backwards(clip_frames)

        return cls(
            frames=_merge(main, animation.easing),
            frames_pong=None if pong is None else _merge(pong, animation.easing),
            repetitions=repeat.count,
            animation_direction=direction,
        )