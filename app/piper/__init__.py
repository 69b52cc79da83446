"""piper - reclaim disk space from regenerable and stale artifacts."""

__version__ = "0.1.0"
