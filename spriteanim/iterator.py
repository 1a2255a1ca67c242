"""Frame-by-frame playback of a pre-computed animation cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from .animation import AnimationDirection, AnimationProgress, ClipId, MarkerId
from .cache import (
    AnimationCache,
    CacheClipEnd,
    CacheClipRepetitionEnd,
    CacheEvent,
    CacheFrame,
    CacheMarkerHit,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerHit:
    """A marker placed on a frame was hit."""

    marker_id: MarkerId
    animation_repetition: int
    clip_id: ClipId
    clip_repetition: int


@dataclass(frozen=True)
class ClipRepetitionEnd:
    """A repetition of a clip ended."""

    clip_id: ClipId
    clip_repetition: int


@dataclass(frozen=True)
class ClipEnd:
    """A clip ended."""

    clip_id: ClipId


@dataclass(frozen=True)
class AnimationRepetitionEnd:
    """A repetition of the whole animation ended."""

    animation_repetition: int


IteratorEvent = Union[MarkerHit, ClipRepetitionEnd, ClipEnd, AnimationRepetitionEnd]


@dataclass(frozen=True)
class IteratorFrame:
    """A cached frame annotated with the repetition of the animation it belongs to."""

    atlas_index: int
    duration: int
    clip_id: ClipId
    clip_repetition: int
    animation_repetition: int
    events: tuple[IteratorEvent, ...] = ()


def _promote(events: tuple[CacheEvent, ...], animation_repetition: int) -> list[IteratorEvent]:
    promoted: list[IteratorEvent] = []
    for event in events:
        match event:
            case CacheMarkerHit(marker_id, clip_id, clip_repetition):
                promoted.append(MarkerHit(marker_id, animation_repetition, clip_id, clip_repetition))
            case CacheClipRepetitionEnd(clip_id, clip_repetition):
                promoted.append(ClipRepetitionEnd(clip_id, clip_repetition))
            case CacheClipEnd(clip_id):
                promoted.append(ClipEnd(clip_id))
            case _:
                raise TypeError(f"unknown cache event {event!r}")
    return promoted


class AnimationIterator:
    """Advances an animation frame by frame until its last repetition ends.

    Each step yields an ``(IteratorFrame, AnimationProgress)`` pair.
    """

    def __init__(self, cache: AnimationCache) -> None:
        self._cache = cache
        self._next = AnimationProgress()
        self._repetition_just_ended: Optional[CacheFrame] = None

    @property
    def cache(self) -> AnimationCache:
        return self._cache

    def to(self, progress: AnimationProgress) -> None:
        """Move to the given progress; raise ValueError if it lies outside the animation."""
        frame_count = len(self._cache.frames)
        if progress.frame >= frame_count:
            message = (
                f"invalid frame {progress.frame} in an animation of {frame_count} frames, "
                "cannot update progress"
            )
            logger.warning(message)
            raise ValueError(message)

        repetitions = self._cache.repetitions
        if repetitions is not None and progress.repetition >= repetitions:
            message = (
                f"invalid repetition {progress.repetition} in an animation of "
                f"{repetitions} repetitions, cannot update progress"
            )
            logger.warning(message)
            raise ValueError(message)

        self._next = progress
        self._repetition_just_ended = None

    def __iter__(self) -> Iterator[tuple[IteratorFrame, AnimationProgress]]:
        return self

    def __next__(self) -> tuple[IteratorFrame, AnimationProgress]:
        cache = self._cache
        position = self._next

        frames = cache.frames
        if cache.frames_pong is not None and position.repetition % 2 == 1:
            frames = cache.frames_pong

        if position.frame >= len(frames):
            raise StopIteration

        cached = frames[position.frame]
        events = _promote(cached.events, position.repetition)

        previous = self._repetition_just_ended
        if previous is not None:
            events.extend(
                (
                    ClipRepetitionEnd(previous.clip_id, previous.clip_repetition),
                    ClipEnd(previous.clip_id),
                    AnimationRepetitionEnd(max(position.repetition - 1, 0)),
                )
            )
            self._repetition_just_ended = None

        frame = IteratorFrame(
            atlas_index=cached.atlas_index,
            duration=cached.duration,
            clip_id=cached.clip_id,
            clip_repetition=cached.clip_repetition,
            animation_repetition=position.repetition,
            events=tuple(events),
        )

        next_frame = position.frame + 1
        next_repetition = position.repetition
        if next_frame >= len(cache.frames):
            next_repetition += 1
            self._repetition_just_ended = cached
            if cache.repetitions is None or next_repetition < cache.repetitions:
                # After the first ping-pong repetition, the turning frame is not played twice.
                ping_pong = cache.animation_direction is AnimationDirection.PING_PONG
                next_frame = 1 if ping_pong else 0
        self._next = AnimationProgress(next_frame, next_repetition)

        return frame, position