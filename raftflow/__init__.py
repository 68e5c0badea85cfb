"""Raft follower progress tracking, in-flight flow control and log description helpers."""

__version__ = "0.1.0"
__all__ = ["entries", "inflights", "progress"]