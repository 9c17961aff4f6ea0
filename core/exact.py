"""Hash index matching for exact comparisons."""

import logging
from typing import Dict, List, Sequence

import xxhash

from config.models import CompareConfig, EngineSettings, ProgressStage, Record, RowOutcome
from core.preprocessor import KeyPreprocessor, build_key
from core.progress import ProgressReporter, band, should_report

logger = logging.getLogger(__name__)


class ExactMatchEngine:
    """
    Classifies secondary records by key membership in a master index.

    Both sets are scanned exactly once, so a run costs O(n + m) instead of
    comparing every pair. When several master records share a key the last
    one seen is kept; the index only answers membership, so this never
    changes a classification.
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
        self.preprocessor = KeyPreprocessor(
            case_sensitive=config.case_sensitive,
            trim_whitespace=config.trim_whitespace
        )

    def _digest(self, record: Record, columns: Sequence[str]) -> bytes:
        key = build_key(
            record, columns, self.preprocessor, self.settings.key_delimiter
        )
        return xxhash.xxh3_128(key.encode('utf-8')).digest()

    def build_index(self, master_records: Sequence[Record]) -> Dict[bytes, Record]:
        """Map each master key digest to the last master record carrying it."""
        total = len(master_records)
        self.reporter.emit(
            ProgressStage.BUILDING_INDEX,
            self.settings.index_band[0],
            f"Building hash index for {total} master rows..."
        )

        index: Dict[bytes, Record] = {}
        for i, record in enumerate(master_records):
            index[self._digest(record, self.config.master_columns)] = record

            if should_report(i, self.settings.chunk_size):
                self.reporter.emit(
                    ProgressStage.BUILDING_INDEX,
                    band(self.settings.index_band, i, total),
                    f"Building hash index: {i}/{total} rows processed..."
                )

        duplicates = total - len(index)
        if duplicates:
            logger.debug(
                f"{duplicates} master rows share a key with a later row"
            )
        return index

    def probe(
        self,
        index: Dict[bytes, Record],
        secondary_records: Sequence[Record]
    ) -> List[RowOutcome]:
        """Classify each secondary record by membership in the index."""
        total = len(secondary_records)
        self.reporter.emit(
            ProgressStage.COMPARING,
            self.settings.compare_band[0],
            "Comparing rows..."
        )

        outcomes = []
        for i, record in enumerate(secondary_records):
            is_matched = self._digest(record, self.config.secondary_columns) in index
            outcomes.append(RowOutcome(row_index=i + 1, matched=is_matched, data=record))

            if should_report(i, self.settings.chunk_size):
                self.reporter.emit(
                    ProgressStage.COMPARING,
                    band(self.settings.compare_band, i, total),
                    f"Comparing: {i}/{total} rows processed..."
                )
        return outcomes

    def run(
        self,
        master_records: Sequence[Record],
        secondary_records: Sequence[Record]
    ) -> List[RowOutcome]:
        index = self.build_index(master_records)
        logger.info(f"Hash index built: {len(index)} unique keys")
        return self.probe(index, secondary_records)
