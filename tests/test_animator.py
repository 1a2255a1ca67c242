import pytest

from spriteanim.animation import AnimationDirection, AnimationId, AnimationProgress, ClipId, MarkerId
from spriteanim.animator import (
    AnimationEndEvent,
    AnimationRepetitionEndEvent,
    Animator,
    ClipEndEvent,
    ClipRepetitionEndEvent,
    MarkerHitEvent,
    SpriteAnimation,
)
from spriteanim.cache import AnimationCache, CacheFrame, CacheMarkerHit

CLIP = ClipId(0)
ANIM = AnimationId(0)
OTHER = AnimationId(1)


def make_cache(atlas, repetitions=1, first_events=()):
    frames = [CacheFrame(index, 100, CLIP, 0) for index in atlas]
    frames[0] = CacheFrame(atlas[0], 100, CLIP, 0, tuple(first_events))
    return AnimationCache(tuple(frames), None, repetitions, AnimationDirection.FORWARDS)


CACHES = {ANIM: make_cache([3, 4, 5]), OTHER: make_cache([7, 8])}


def run(animator, delta, sprites, caches=CACHES):
    return animator.update(delta, caches.__getitem__, sprites)


def test_first_frame_is_shown_even_when_paused():
    sprite = SpriteAnimation(ANIM, playing=False, atlas_index=0)
    animator = Animator()
    assert run(animator, 1.0, {"e": sprite}) == []
    assert sprite.atlas_index == 3
    assert sprite.progress == AnimationProgress()
    run(animator, 1.0, {"e": sprite})
    assert sprite.atlas_index == 3


def test_time_advances_frames():
    sprite = SpriteAnimation(ANIM, atlas_index=0)
    run(Animator(), 0.15, {"e": sprite})
    assert sprite.atlas_index == 4
    assert sprite.progress == AnimationProgress(1, 0)


def test_end_events_when_animation_finishes():
    caches = {ANIM: make_cache([3, 4])}
    sprite = SpriteAnimation(ANIM, atlas_index=0)
    animator = Animator()
    events = run(animator, 0.25, {"e": sprite}, caches)
    assert events == [
        ClipRepetitionEndEvent(entity="e", animation_id=ANIM, clip_id=CLIP, clip_repetition=0),
        ClipEndEvent(entity="e", animation_id=ANIM, clip_id=CLIP),
        AnimationRepetitionEndEvent(entity="e", animation_id=ANIM, animation_repetition=0),
        AnimationEndEvent(entity="e", animation_id=ANIM),
    ]
    assert sprite.atlas_index == 4
    assert run(animator, 1.0, {"e": sprite}, caches) == []


def test_looping_animation_reports_repetition_end_but_not_end():
    caches = {ANIM: make_cache([3, 4], repetitions=None)}
    sprite = SpriteAnimation(ANIM)
    events = run(Animator(), 0.25, {"e": sprite}, caches)
    assert sprite.progress == AnimationProgress(0, 1)
    assert AnimationRepetitionEndEvent("e", ANIM, 0) in events
    assert not any(isinstance(event, AnimationEndEvent) for event in events)


def test_marker_events_are_reported():
    marker = MarkerId(2)
    caches = {ANIM: make_cache([3, 4], first_events=[CacheMarkerHit(marker, CLIP, 0)])}
    events = run(Animator(), 0.0, {"e": SpriteAnimation(ANIM)}, caches)
    assert events == [
        MarkerHitEvent(
            entity="e",
            marker_id=marker,
            animation_id=ANIM,
            animation_repetition=0,
            clip_id=CLIP,
            clip_repetition=0,
        )
    ]


def test_manual_progress_change_is_applied():
    sprite = SpriteAnimation(ANIM, atlas_index=0)
    animator = Animator()
    run(animator, 0.0, {"e": sprite})
    sprite.progress = AnimationProgress(2, 0)
    run(animator, 0.0, {"e": sprite})
    assert sprite.atlas_index == 5
    assert sprite.progress == AnimationProgress(2, 0)


def test_invalid_manual_progress_is_restored():
    sprite = SpriteAnimation(ANIM, atlas_index=0)
    animator = Animator()
    run(animator, 0.0, {"e": sprite})
    sprite.progress = AnimationProgress(9, 0)
    run(animator, 0.0, {"e": sprite})
    assert sprite.progress == AnimationProgress(0, 0)
    assert sprite.atlas_index == 3


def test_valid_starting_progress_is_used():
    sprite = SpriteAnimation(ANIM, progress=AnimationProgress(2, 0), atlas_index=0)
    run(Animator(), 0.0, {"e": sprite})
    assert sprite.atlas_index == 5


def test_invalid_starting_progress_starts_from_beginning():
    sprite = SpriteAnimation(ANIM, progress=AnimationProgress(9, 0), atlas_index=0)
    run(Animator(), 0.0, {"e": sprite})
    assert sprite.progress == AnimationProgress()
    assert sprite.atlas_index == 3


def test_switch_starts_other_animation():
    sprite = SpriteAnimation(ANIM, atlas_index=0)
    animator = Animator()
    run(animator, 0.15, {"e": sprite})
    sprite.switch(OTHER)
    assert sprite.animation_id == OTHER
    assert sprite.progress == AnimationProgress()
    run(animator, 0.0, {"e": sprite})
    assert sprite.atlas_index == 7


def test_reset_returns_to_start():
    sprite = SpriteAnimation(ANIM, progress=AnimationProgress(2, 0))
    sprite.reset()
    assert sprite.progress == AnimationProgress()


def test_speed_factor_scales_time():
    fast = SpriteAnimation(ANIM, speed_factor=2.0, atlas_index=0)
    slow = SpriteAnimation(ANIM, atlas_index=0)
    run(Animator(), 0.15, {"e": fast})
    run(Animator(), 0.30, {"e": slow})
    assert fast.progress == slow.progress
    assert fast.atlas_index == slow.atlas_index


def test_sprite_without_atlas_still_progresses():
    sprite = SpriteAnimation(ANIM)
    run(Animator(), 0.15, {"e": sprite})
    assert sprite.atlas_index is None
    assert sprite.progress == AnimationProgress(1, 0)


def test_negative_delta_is_rejected():
    with pytest.raises(ValueError):
        run(Animator(), -0.1, {"e": SpriteAnimation(ANIM)})


def test_sprites_are_independent():
    first = SpriteAnimation(ANIM, atlas_index=0)
    second = SpriteAnimation(OTHER, atlas_index=0)
    run(Animator(), 0.15, {"a": first, "b": second})
    assert first.atlas_index == 4
    assert second.atlas_index == 8