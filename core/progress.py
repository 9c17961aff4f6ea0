"""Progress reporting for long running comparisons."""

import logging
import threading
from typing import Callable, Dict, Optional, Tuple

from config.models import ProgressEvent, ProgressStage

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]

PROGRESS_TOTAL = 100


def band(stage_band: Tuple[int, int], done: int, total: int) -> int:
    """Scale ``done`` out of ``total`` records into a percentage band."""
    start, end = stage_band
    if total <= 0:
        return start
    return start + int((done / total) * (end - start))


def should_report(index: int, chunk_size: int) -> bool:
    """True on the first record of each chunk."""
    return index % chunk_size == 0


class ProgressReporter:
    """
    Forwards progress events to an optional sink.

    ``current`` never decreases within a stage, also when several worker
    threads report concurrently. The sink is fire-and-forget: its return
    value is ignored and its failures are logged, not raised.
    """

    def __init__(self, sink: Optional[ProgressSink] = None):
        self.sink = sink
        self._lock = threading.Lock()
        self._high_water: Dict[ProgressStage, int] = {}

    def emit(self, stage: ProgressStage, current: int, message: str) -> None:
        with self._lock:
            current = max(current, self._high_water.get(stage, current))
            self._high_water[stage] = current
            event = ProgressEvent(
                stage=stage,
                current=current,
                total=PROGRESS_TOTAL,
                message=message
            )
            logger.debug(f"{stage.value}: {current}/{PROGRESS_TOTAL} {message}")
            if self.sink is None:
                return
            try:
                self.sink(event)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")
