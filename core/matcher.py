"""Main record comparison system implementation."""

from typing import Any, Dict, List, Optional, Sequence
import logging
import time

import pandas as pd

from config.models import (
    CompareConfig,
    ComparisonResult,
    EngineSettings,
    FilePreview,
    ProgressStage,
    Record
)
from core.errors import InvalidArgumentError, ResourceExhaustedError
from core.exact import ExactMatchEngine
from core.fuzzy import FuzzyMatchEngine
from core.progress import PROGRESS_TOTAL, ProgressReporter, ProgressSink


class RecordMatcher:
    """
    Compares a secondary record set against a master record set.

    Every call builds its own index and discards it on return, so one
    matcher can serve any number of independent comparisons.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        progress_callback: Optional[ProgressSink] = None
    ):
        """
        Initialize the record matcher.

        Args:
            settings: Engine tuning (progress cadence, sample size, workers)
            progress_callback: Optional sink receiving ProgressEvent objects
        """
        self.settings = settings or EngineSettings()
        self.progress_callback = progress_callback
        self._initialize_logging()

    def _initialize_logging(self) -> None:
        """Setup logging configuration."""
        self.logger = logging.getLogger(__name__)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    '%(asctime)s - %(levelname)s - %(message)s'
                )
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def _create_engine(self, config: CompareConfig, reporter: ProgressReporter):
        if config.is_fuzzy:
            return FuzzyMatchEngine(config, self.settings, reporter)
        return ExactMatchEngine(config, self.settings, reporter)

    def compare(
        self,
        master_records: Sequence[Record],
        secondary_records: Sequence[Record],
        config: CompareConfig,
        progress_callback: Optional[ProgressSink] = None
    ) -> ComparisonResult:
        """
        Classify every secondary record as matched or unmatched.

        Args:
            master_records: Reference records
            secondary_records: Records to classify, in output order
            config: Column pairing and comparison mode
            progress_callback: Overrides the matcher's sink for this call

        Returns:
            ComparisonResult: Counts and one RowOutcome per secondary record

        Raises:
            InvalidArgumentError: If the configuration is invalid; raised
                before any record is read
            ResourceExhaustedError: If the inputs do not fit in memory
        """
        config.validate()
        master_records = list(master_records)
        secondary_records = list(secondary_records)

        start_time = time.time()
        reporter = ProgressReporter(progress_callback or self.progress_callback)
        engine = self._create_engine(config, reporter)

        self.logger.info(
            f"Starting {config.mode.value} comparison: "
            f"{len(master_records)} master rows, "
            f"{len(secondary_records)} secondary rows"
        )

        try:
            outcomes = engine.run(master_records, secondary_records)
        except MemoryError as e:
            raise ResourceExhaustedError(
                f"Out of memory comparing {len(master_records)} master rows "
                f"against {len(secondary_records)} secondary rows"
            ) from e

        reporter.emit(ProgressStage.COMPLETE, PROGRESS_TOTAL, "Comparison complete!")

        result = ComparisonResult.from_outcomes(
            outcomes, config, elapsed_seconds=time.time() - start_time
        )
        self.logger.info(
            f"Comparison completed in {result.elapsed_seconds:.2f} seconds: "
            f"{result.matched_rows} matched, {result.unmatched_rows} unmatched "
            f"of {result.total_rows}"
        )
        return result

    def compare_dataframes(
        self,
        master_df: pd.DataFrame,
        secondary_df: pd.DataFrame,
        config: CompareConfig,
        progress_callback: Optional[ProgressSink] = None
    ) -> ComparisonResult:
        """Compare two DataFrames, treating missing cells as blank."""
        return self.compare(
            dataframe_to_records(master_df),
            dataframe_to_records(secondary_df),
            config,
            progress_callback
        )


def dataframe_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Rows of a DataFrame as dicts, blanks defaulted to ''."""
    return df.astype(object).where(df.notna(), '').to_dict('records')


def preview_first_rows(records: Sequence[Record], n: int = 3) -> FilePreview:
    """
    Describe a record set without comparing it.

    Args:
        records: Records to describe
        n: Number of leading rows to include

    Returns:
        FilePreview: Row count, columns of the first record and sample rows
    """
    if n < 0:
        raise InvalidArgumentError("Preview row count must not be negative")
    records = list(records)
    columns = list(records[0].keys()) if records else []
    return FilePreview(
        total_rows=len(records),
        columns=columns,
        sample_rows=[dict(record) for record in records[:n]]
    )


def compare(
    master_records: Sequence[Record],
    secondary_records: Sequence[Record],
    config: CompareConfig,
    progress_callback: Optional[ProgressSink] = None,
    settings: Optional[EngineSettings] = None
) -> ComparisonResult:
    """Run a single comparison with a throwaway matcher."""
    return RecordMatcher(settings=settings).compare(
        master_records, secondary_records, config, progress_callback
    )
