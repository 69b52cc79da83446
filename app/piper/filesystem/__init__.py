"""Filesystem crawling and removal module.

This module provides the reclaimable-artifact heuristics, the parallel
crawler, protected path management and trash operations for the
filesystem domain.
"""

from piper.filesystem.classifier import Classifier
from piper.filesystem.crawler import Crawler
from piper.filesystem.models import CandidateItem, Traversal
from piper.filesystem.protected import VCS_DIR_NAMES, is_protected_path, is_vcs_dir
from piper.filesystem.trash import TrashOperator, TrashResult

__all__ = [
    "VCS_DIR_NAMES",
    "CandidateItem",
    "Classifier",
    "Crawler",
    "Traversal",
    "TrashOperator",
    "TrashResult",
    "is_protected_path",
    "is_vcs_dir",
]
