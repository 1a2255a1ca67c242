"""Plays animations on sprites as time advances and reports animation events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Hashable, Mapping, Optional, Union

from .animation import AnimationId, AnimationProgress, ClipId, MarkerId
from .cache import AnimationCache
from .iterator import (
    AnimationIterator,
    AnimationRepetitionEnd,
    ClipEnd,
    ClipRepetitionEnd,
    IteratorEvent,
    IteratorFrame,
    MarkerHit,
)

_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MILLISECOND = 1_000_000


@dataclass(frozen=True)
class MarkerHitEvent:
    """A marker was hit on the current frame."""

    entity: Hashable
    marker_id: MarkerId
    animation_id: AnimationId
    animation_repetition: int
    clip_id: ClipId
    clip_repetition: int


@dataclass(frozen=True)
class ClipRepetitionEndEvent:
    """A repetition of a clip ended."""

    entity: Hashable
    animation_id: AnimationId
    clip_id: ClipId
    clip_repetition: int


@dataclass(frozen=True)
class ClipEndEvent:
    """A clip ended."""

    entity: Hashable
    animation_id: AnimationId
    clip_id: ClipId


@dataclass(frozen=True)
class AnimationRepetitionEndEvent:
    """A repetition of an animation ended."""

    entity: Hashable
    animation_id: AnimationId
    animation_repetition: int


@dataclass(frozen=True)
class AnimationEndEvent:
    """An animation played its last frame."""

    entity: Hashable
    animation_id: AnimationId


AnimationEvent = Union[
    MarkerHitEvent,
    ClipRepetitionEndEvent,
    ClipEndEvent,
    AnimationRepetitionEndEvent,
    AnimationEndEvent,
]


@dataclass
class SpriteAnimation:
    """Playback state of the animation assigned to one sprite.

    ``atlas_index`` is the sprite's atlas index; None means the sprite has no atlas.
    """

    animation_id: AnimationId
    progress: AnimationProgress = field(default_factory=AnimationProgress)
    playing: bool = True
    speed_factor: float = 1.0
    atlas_index: Optional[int] = None

    def switch(self, animation_id: AnimationId) -> None:
        """Play another animation from its start."""
        self.animation_id = animation_id
        self.reset()

    def reset(self) -> None:
        """Go back to the start of the current animation."""
        self.progress = AnimationProgress()


Frame = tuple[IteratorFrame, AnimationProgress]


@dataclass
class _Instance:
    animation_id: AnimationId
    iterator: AnimationIterator
    current_frame: Optional[Frame]
    accumulated_ns: int = 0


def _promote(
    event: IteratorEvent, entity: Hashable, animation_id: AnimationId
) -> AnimationEvent:
    match event:
        case MarkerHit(marker_id, animation_repetition, clip_id, clip_repetition):
            return MarkerHitEvent(
                entity, marker_id, animation_id, animation_repetition, clip_id, clip_repetition
            )
        case ClipRepetitionEnd(clip_id, clip_repetition):
            return ClipRepetitionEndEvent(entity, animation_id, clip_id, clip_repetition)
        case ClipEnd(clip_id):
            return ClipEndEvent(entity, animation_id, clip_id)
        case AnimationRepetitionEnd(animation_repetition):
            return AnimationRepetitionEndEvent(entity, animation_id, animation_repetition)
    raise TypeError(f"unknown iterator event {event!r}")


def _play_frame(
    iterator: AnimationIterator,
    sprite: SpriteAnimation,
    entity: Hashable,
    events: list[AnimationEvent],
) -> Optional[Frame]:
    try:
        frame, progress = next(iterator)
    except StopIteration:
        return None

    if sprite.atlas_index is not None and sprite.atlas_index != frame.atlas_index:
        sprite.atlas_index = frame.atlas_index
    sprite.progress = progress
    events.extend(_promote(event, entity, sprite.animation_id) for event in frame.events)
    return frame, progress


class Animator:
    """Keeps one playing instance per sprite and advances them over time."""

    def __init__(self) -> None:
        self._instances: dict[Hashable, _Instance] = {}

    def update(
        self,
        delta_seconds: float,
        cache_for: Callable[[AnimationId], AnimationCache],
        sprites: Mapping[Hashable, SpriteAnimation],
    ) -> list[AnimationEvent]:
        """Advance every sprite by ``delta_seconds`` and return the events produced."""
        if delta_seconds < 0:
            raise ValueError(f"time cannot go backwards, got {delta_seconds}")

        events: list[AnimationEvent] = []

        self._instances = {
            entity: instance for entity, instance in self._instances.items() if entity in sprites
        }

        for entity, sprite in sprites.items():
            instance = self._instances.get(entity)

            if instance is None or instance.animation_id != sprite.animation_id:
                iterator = AnimationIterator(cache_for(sprite.animation_id))
                if sprite.progress != AnimationProgress():
                    try:
                        iterator.to(sprite.progress)
                    except ValueError:
                        sprite.progress = AnimationProgress()
                first_frame = _play_frame(iterator, sprite, entity, events)
                instance = _Instance(sprite.animation_id, iterator, first_frame)
                self._instances[entity] = instance

            # Manual progress changes made on the sprite since the last frame
            current = instance.current_frame
            if current is not None and sprite.progress != current[1]:
                try:
                    instance.iterator.to(sprite.progress)
                except ValueError:
                    sprite.progress = current[1]
                else:
                    new_frame = _play_frame(instance.iterator, sprite, entity, events)
                    if new_frame is not None:
                        instance.current_frame = new_frame
                        instance.accumulated_ns = 0

            if not sprite.playing:
                continue

            elapsed_ns = round(delta_seconds * sprite.speed_factor * _NANOS_PER_SECOND)
            if elapsed_ns < 0:
                raise ValueError(f"speed factor must not be negative, got {sprite.speed_factor}")
            instance.accumulated_ns += elapsed_ns

            while instance.current_frame is not None:
                frame = instance.current_frame[0]
                frame_ns = frame.duration * _NANOS_PER_MILLISECOND
                if instance.accumulated_ns <= frame_ns:
                    break
                instance.accumulated_ns -= frame_ns

                instance.current_frame = _play_frame(instance.iterator, sprite, entity, events)
                if instance.current_frame is None:
                    animation_id = instance.animation_id
                    events.extend(
                        (
                            ClipRepetitionEndEvent(
                                entity, animation_id, frame.clip_id, frame.clip_repetition
                            ),
                            ClipEndEvent(entity, animation_id, frame.clip_id),
                            AnimationRepetitionEndEvent(
                                entity, animation_id, frame.animation_repetition
                            ),
                            AnimationEndEvent(entity, animation_id),
                        )
                    )

        return events