"""Spritesheet animation playback: clips, animations, frame caches, iterators and an animator."""

__version__ = "0.1.0"

__all__ = ["animation", "cache", "iterator", "animator"]