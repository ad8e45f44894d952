"""
Change-detection gate that publishes pitch estimates to observers.
"""

import logging
import threading
from collections.abc import Callable

from .pitch import PitchEstimate

logger = logging.getLogger(__name__)

PitchCallback = Callable[[PitchEstimate], None]


class PitchEmitter:
    """
    Holds the last published estimate and notifies observers on change.

    An estimate is published when change filtering is suppressed or when its
    frequency differs from the held one. The comparison is exact, so two
    windows that yield bit-identical frequencies publish only once.

    Publishing and reading ``current`` are guarded by a lock, so a consumer
    thread may read while another thread drives detection. Observers run on
    the publishing thread.
    """

    def __init__(self, suppress_change_filtering: bool = False):
        self.suppress_change_filtering = suppress_change_filtering
        self._current = PitchEstimate.empty()
        self._observers: list[PitchCallback] = []
        self._lock = threading.Lock()

    @property
    def current(self) -> PitchEstimate:
        """Last published estimate."""
        with self._lock:
            return self._current

    def connect(self, callback: PitchCallback):
        """Register a callback invoked with every published estimate."""
        with self._lock:
            if callback not in self._observers:
                self._observers.append(callback)

    def disconnect(self, callback: PitchCallback):
        with self._lock:
            if callback in self._observers:
                self._observers.remove(callback)

    def offer(self, estimate: PitchEstimate) -> bool:
        """
        Publish the estimate if the change policy allows it.

        Returns:
            True if the estimate was published and observers were notified
        """
        with self._lock:
            if not self.suppress_change_filtering and estimate.frequency == self._current.frequency:
                return False
            self._current = estimate
            observers = list(self._observers)

        for callback in observers:
            try:
                callback(estimate)
            except Exception as e:
                logger.error(f"Error in pitch change callback: {e}", exc_info=True)
        return True

    def reset(self):
        """Forget the held estimate without notifying."""
        with self._lock:
            self._current = PitchEstimate.empty()
