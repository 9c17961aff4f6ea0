"""Phonetic bucket matching for fuzzy comparisons."""

import logging
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from config.models import CompareConfig, EngineSettings, ProgressStage, Record, RowOutcome
from core.phonetic import phonetic_key_for_values
from core.preprocessor import selected_values
from core.progress import ProgressReporter, band, should_report
from core.similarity import calculate_average_similarity, calculate_field_similarities

logger = logging.getLogger(__name__)


def fallback_sample_indices(master_count: int, sample_size: int) -> np.ndarray:
    """
    Evenly spaced master positions scored when a phonetic bucket is empty.

    Deterministic in ``master_count``: ``min(sample_size, master_count)``
    positions, ``master_count // size`` apart, starting at 0.
    """
    size = min(sample_size, master_count)
    if size <= 0:
        return np.empty(0, dtype=np.int64)
    stride = master_count // size
    return np.arange(size, dtype=np.int64) * stride


class FuzzyMatchEngine:
    """
    Finds the most similar master record for each secondary record.

    Master records are grouped by phonetic key, and only the bucket sharing
    the secondary record's key is scored. Rows whose key has no bucket are
    scored against a fixed-size sample of the master set, so recall on
    phonetic misses is traded for a bounded cost per row.
    """

    def __init__(
        self,
        config: CompareConfig,
        settings: EngineSettings,
        reporter: ProgressReporter
    ):
        self.config = config
        self.settings = settings
        self.reporter = reporter
        self.threshold = float(config.threshold)

        self._master_values: List[List[str]] = []
        self._buckets: Dict[str, List[int]] = {}
        self._fallback: np.ndarray = np.empty(0, dtype=np.int64)

        self._counter_lock = threading.Lock()
        self._processed = 0
        self._total = 0

    def build_index(self, master_records: Sequence[Record]) -> None:
        """Group master records into phonetic buckets."""
        total = len(master_records)
        self.reporter.emit(
            ProgressStage.BUILDING_INDEX,
            self.settings.index_band[0],
            f"Building phonetic index for {total} master rows..."
        )

        buckets = defaultdict(list)
        master_values = []
        for i, record in enumerate(master_records):
            values = selected_values(record, self.config.master_columns)
            master_values.append(values)
            buckets[phonetic_key_for_values(values)].append(i)

            if should_report(i, self.settings.chunk_size):
                self.reporter.emit(
                    ProgressStage.BUILDING_INDEX,
                    band(self.settings.index_band, i, total),
                    f"Building phonetic index: {i}/{total} rows processed..."
                )

        self._master_values = master_values
        self._buckets = dict(buckets)
        self._fallback = fallback_sample_indices(
            total, self.settings.fallback_sample_size
        )

        if self._buckets:
            sizes = [len(bucket) for bucket in self._buckets.values()]
            logger.debug(
                f"Phonetic index: {len(sizes)} buckets, "
                f"largest={max(sizes)}, mean={np.mean(sizes):.2f}"
            )

    def _candidates(self, values: List[str]) -> Sequence[int]:
        bucket = self._buckets.get(phonetic_key_for_values(values))
        if bucket:
            return bucket
        return self._fallback

    def best_match(
        self,
        values: List[str]
    ) -> Tuple[Optional[float], Optional[List[str]]]:
        """
        Score the candidates for one set of secondary values.

        Returns:
            Tuple: Best average similarity (0-100) and the master values that
                produced it, or ``(None, None)`` when nothing was scored
        """
        best_score = None
        best_values = None
        for idx in self._candidates(values):
            candidate = self._master_values[idx]
            score = calculate_average_similarity(values, candidate)
            if best_score is None or score > best_score:
                best_score = score
                best_values = candidate
        return best_score, best_values

    def _match_row(self, row_index: int, record: Record) -> RowOutcome:
        values = selected_values(record, self.config.secondary_columns)
        score, master_values = self.best_match(values)

        if score is None:
            outcome = RowOutcome(row_index=row_index, matched=False, data=record)
        else:
            per_column = dict(zip(
                self.config.similarity_keys(),
                calculate_field_similarities(values, master_values)
            ))
            outcome = RowOutcome(
                row_index=row_index,
                matched=score >= self.threshold,
                data=record,
                similarity_score=score,
                per_column_similarity=per_column
            )

        self._advance()
        return outcome

    def _advance(self) -> None:
        with self._counter_lock:
            done = self._processed
            self._processed += 1
        if should_report(done, self.settings.chunk_size):
            self.reporter.emit(
                ProgressStage.COMPARING,
                band(self.settings.compare_band, done, self._total),
                f"Comparing: {done}/{self._total} rows processed..."
            )

    def _process_chunk(
        self,
        positions: np.ndarray,
        secondary_records: Sequence[Record]
    ) -> List[RowOutcome]:
        return [
            self._match_row(int(pos) + 1, secondary_records[int(pos)])
            for pos in positions
        ]

    def match_rows(self, secondary_records: Sequence[Record]) -> List[RowOutcome]:
        """Classify every secondary record, preserving input order."""
        self._total = len(secondary_records)
        self._processed = 0
        self.reporter.emit(
            ProgressStage.COMPARING,
            self.settings.compare_band[0],
            "Comparing rows with fuzzy matching..."
        )
        if not secondary_records:
            return []

        workers = min(self.settings.worker_threads, self._total)
        if workers <= 1:
            return self._process_chunk(np.arange(self._total), secondary_records)

        chunks = np.array_split(np.arange(self._total), workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._process_chunk, chunk, secondary_records)
                for chunk in chunks
            ]
            # Chunks are contiguous and collected in submission order
            return [outcome for future in futures for outcome in future.result()]

    def run(
        self,
        master_records: Sequence[Record],
        secondary_records: Sequence[Record]
    ) -> List[RowOutcome]:
        self.build_index(master_records)
        logger.info(
            f"Phonetic index built: {len(self._buckets)} buckets, "
            f"fallback sample of {len(self._fallback)} rows"
        )
        return self.match_rows(secondary_records)
