"""
Deck Conversion Domain

Watches the input directory for presentations and turns them into PDFs:
- freshness.py - Decides whether a paired PDF is up to date
- orchestrator.py - Dedupes events, waits for files to settle, converts
- watchers/filesystem.py - watchdog-backed event source
"""

from .freshness import OutputFreshnessChecker
from .orchestrator import ConversionOrchestrator

__all__ = ["ConversionOrchestrator", "OutputFreshnessChecker"]
