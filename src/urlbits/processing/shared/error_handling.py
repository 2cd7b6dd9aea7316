"""
Per-record diagnostics: counting, logging and fan-out of dropped records
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from urlbits.domain.models import Diagnostic

Subscriber = Callable[[Diagnostic], None]


class DiagnosticReporter:
    """
    Side channel for records dropped by a stage.

    Drops are always counted. Under verbose mode they are also logged and
    handed to every subscriber; diagnostics never travel on the data path.
    Stages running in separate threads share one reporter.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
        stats: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            logger: Configured logger instance
            verbose: Log and publish each drop
            stats: Optional stats dictionary to update
        """
        self.logger = logger or logging.getLogger(__name__)
        self.verbose = verbose
        self.stats = stats if stats is not None else {}
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

        self.stats.setdefault('drop_count', 0)
        self.stats.setdefault('drops_by_stage', {})
        self.stats.setdefault('last_drop', None)

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def report(self, stage: str, text: str, reason: Any) -> Diagnostic:
        """
        Record one dropped record.

        Args:
            stage: Name of the stage that dropped it
            text: The record as text (input line or URI)
            reason: Exception or message explaining the drop

        Returns:
            The diagnostic that was recorded
        """
        diagnostic = Diagnostic(stage=stage, text=text, reason=str(reason))
        with self._lock:
            self._update_stats(diagnostic, reason)

        if self.verbose:
            self._log_drop(diagnostic)
            for subscriber in self._subscribers:
                subscriber(diagnostic)
        return diagnostic

    def _update_stats(self, diagnostic: Diagnostic, reason: Any) -> None:
        self.stats['drop_count'] += 1
        by_stage = self.stats['drops_by_stage']
        by_stage[diagnostic.stage] = by_stage.get(diagnostic.stage, 0) + 1
        self.stats['last_drop'] = {
            'stage': diagnostic.stage,
            'type': type(reason).__name__ if isinstance(reason, Exception) else 'message',
            'text': diagnostic.text,
            'reason': diagnostic.reason,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }

    def _log_drop(self, diagnostic: Diagnostic) -> None:
        self.logger.warning("%s error for %s: %s", diagnostic.stage, diagnostic.text, diagnostic.reason)
