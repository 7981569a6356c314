"""Progress reporting for the reconciliation pass.

Callback-based so the runner does not depend on how progress is rendered.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)


@dataclass
class ProgressUpdate:
    """Tracks done so far out of the batch."""

    current: int
    total: int
    message: str = ""

    @property
    def is_complete(self) -> bool:
        """Check if the batch is done."""
        return self.current >= self.total


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressTracker:
    """Counts finished tracks and forwards throttled updates to a callback."""

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        update_interval: float = 0.5,
    ):
        """Initialize progress tracker.

        Args:
            callback: Function to call with progress updates
            update_interval: Minimum time between updates (seconds)
        """
        self.callback = callback
        self.update_interval = update_interval
        self._last_update_time = 0.0
        self._current = 0
        self._total = 0

    def start(self, total: int) -> None:
        """Start counting a batch of ``total`` tracks."""
        self._current = 0
        self._total = total
        self._notify()

    def update(self) -> None:
        """Count one finished track."""
        self._current += 1
        if time.time() - self._last_update_time < self.update_interval:
            return
        self._notify()

    def complete(self, message: str = "") -> None:
        """Mark the batch as done; always reported."""
        self._current = self._total
        self._notify(message)

    def _notify(self, message: str = "") -> None:
        if not self.callback:
            return

        self._last_update_time = time.time()
        try:
            self.callback(ProgressUpdate(self._current, self._total, message))
        except Exception as e:
            logger.error("Error in progress callback: %s", e)


class TqdmProgressReporter:
    """Renders progress updates as a single tqdm bar."""

    def __init__(self, desc: str = "reconciling", disable: bool = False) -> None:
        """Initialize tqdm reporter.

        Args:
            desc: Label shown in front of the bar
            disable: Suppress the bar (e.g. when output is not a terminal)
        """
        self.desc = desc
        self.disable = disable
        self._bar: Optional[Any] = None

    def __call__(self, update: ProgressUpdate) -> None:
        """Handle progress update."""
        if self._bar is None:
            self._bar = tqdm(
                total=update.total, desc=self.desc, unit="track", disable=self.disable
            )

        self._bar.n = update.current
        self._bar.set_postfix_str(update.message)
        self._bar.refresh()

        if update.is_complete:
            self.close()

    def close(self) -> None:
        """Close the bar if one is open."""
        if self._bar is not None:
            self._bar.close()
            self._bar = None
