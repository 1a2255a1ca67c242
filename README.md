# spriteanim

Frame-by-frame playback of spritesheet animations, independent of any game
engine. You describe clips (sequences of atlas indices with a duration,
repetitions, a direction, an easing and markers), compose them into
animations, precompute each animation into a frame cache, and let an
`Animator` advance your sprites as time passes. The animator changes each
sprite's atlas index and progress and returns the events that were produced.

## Installation

```
pip install spriteanim
```

To run the test suite:

```
pip install "spriteanim[test]"
pytest
```

## Modules

- `spriteanim.animation`: identifiers (`AnimationId`, `ClipId`, `MarkerId`),
  playback parameters (`AnimationDuration`, `AnimationRepeat`,
  `AnimationDirection`), `AnimationProgress` and `Animation`.
- `spriteanim.cache`: `ClipSettings`, `AnimationCache`, `CacheFrame`, the
  cached events and `apply_easing`.
- `spriteanim.iterator`: `AnimationIterator` and the frames and events it
  yields.
- `spriteanim.animator`: `SpriteAnimation`, `Animator` and the animation
  events.

## Example

```python
from spriteanim.animation import Animation, AnimationDuration, AnimationId, ClipId
from spriteanim.animator import Animator, SpriteAnimation
from spriteanim.cache import AnimationCache, ClipSettings

walk_clip = ClipId(0)
clips = {
    walk_clip: ClipSettings(frames=(0, 1, 2, 3), duration=AnimationDuration.per_frame(100)),
}

walk = AnimationId(0)
caches = {walk: AnimationCache.build(Animation.from_clip(walk_clip), clips)}

animator = Animator()
sprites = {"hero": SpriteAnimation(walk, atlas_index=0)}

animator.update(0.0, caches.__getitem__, sprites)           # plays the first frame
events = animator.update(0.15, caches.__getitem__, sprites)
print(sprites["hero"].atlas_index)                          # 1
```

## Describing animations

- `ClipSettings(frames, duration, repetitions, direction, easing, markers)`
  describes a clip. `frames` holds atlas indices. `repetitions` is a plain
  count that defaults to 1. `markers` maps a frame index within the clip to
  the `MarkerId`s that are hit on that frame.
- `AnimationDuration.per_frame(ms)` or `AnimationDuration.per_repetition(ms)`.
  The default is 100 ms per frame.
- `AnimationRepeat.loop()` (the default for animations) or
  `AnimationRepeat.times(n)`.
- `AnimationDirection.FORWARDS` (the default), `BACKWARDS` or `PING_PONG`.
  In ping-pong mode playback alternates direction on each repetition, and the
  frame where it turns is not played twice.
- `Animation.from_clip(clip_id)` or `Animation.from_clips([...])`, with
  `with_duration`, `with_repetitions`, `with_direction` and `with_easing`.
  Each returns a modified copy. The animation's settings are combined with
  those of its clips: a per-frame duration replaces the clips' durations, and
  a per-repetition duration is divided among the clips in proportion to
  their own lengths.

An easing is either `None` (linear), a function that maps normalized time in
[0, 1] to eased time, or an object with such a `get` method. Clip easing
applies within each clip repetition. Animation easing applies across the
whole cycle. `apply_easing(durations, easing)` returns the redistributed
millisecond durations.

## Playback

- `AnimationCache.build(animation, clips)` precomputes one cycle of the
  animation. Clips with no frames, no repetitions or no duration are skipped.
  An animation set to repeat zero times, or lasting 0 ms, gives an empty
  cache that plays nothing. An unknown clip id raises `KeyError`.
- `AnimationIterator(cache)` yields `(IteratorFrame, AnimationProgress)`
  pairs until the last repetition ends. `to(progress)` jumps to a frame and
  repetition and raises `ValueError` if that position lies outside the
  animation.
- `Animator.update(delta_seconds, cache_for, sprites)` advances every sprite.
  `sprites` maps any hashable key to a `SpriteAnimation`. `cache_for` returns
  the `AnimationCache` for an `AnimationId`. The animator drops the state of
  keys that are no longer present. A negative time step or speed factor
  raises `ValueError`.

A `SpriteAnimation` holds `animation_id`, `progress`, `playing`,
`speed_factor` and `atlas_index`:

- `switch(animation_id)` starts another animation from its beginning.
- `reset()` rewinds the current animation.
- Assigning to `progress` jumps to that position on the next update. An
  invalid position is reverted to the last valid one.
- A paused sprite still gets its first frame assigned.
- When `atlas_index` is `None`, the sprite is treated as having no atlas and
  the field is left untouched.

## Events

`Animator.update` returns, in order:

- `MarkerHitEvent`: a marked frame was played.
- `ClipRepetitionEndEvent`: one repetition of a clip finished.
- `ClipEndEvent`: a clip finished all of its repetitions.
- `AnimationRepetitionEndEvent`: one cycle of the animation finished.
- `AnimationEndEvent`: the animation played its last frame.

End events are reported when the first frame that follows is played. When a
non-looping animation stops, its final end events are reported together.

## What this package does not do

It draws nothing and loads no images. It has no clip or animation registry
and no naming of animations or markers: you choose the ids and keep the
`ClipSettings` and caches yourself. It ships no built-in easing curves, so you
supply your own easing functions.