"""
Retention Domain

Deletes presentations and PDFs that outlived the retention window:
- sweeper.py - One pass over the input and output directories
- scheduler.py - Startup sweep plus a periodic re-run
"""

from .scheduler import RetentionScheduler
from .sweeper import RetentionSweeper

__all__ = ["RetentionScheduler", "RetentionSweeper"]
