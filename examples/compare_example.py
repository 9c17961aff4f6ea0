"""Example usage of the record comparison system with Excel files."""

import logging
from pathlib import Path
from typing import Optional

from config.models import CompareConfig, CompareMode, EngineSettings, ProgressEvent
from core import excel_io
from core.matcher import RecordMatcher


def log_progress(event: ProgressEvent) -> None:
    logging.info(f"[{event.stage.value}] {event.current}/{event.total} {event.message}")


def create_name_matcher(worker_threads: int = 1) -> RecordMatcher:
    """
    Create a matcher that reports progress to the log.

    Args:
        worker_threads: Threads used to score rows in fuzzy mode

    Returns:
        RecordMatcher: Configured matcher instance
    """
    return RecordMatcher(
        settings=EngineSettings(worker_threads=worker_threads),
        progress_callback=log_progress
    )


def compare_excel_files(
    master_file: Path,
    secondary_file: Path,
    output_file: Optional[Path] = None,
    fuzzy: bool = False,
    threshold: float = 85.0,
    worker_threads: int = 1
):
    """
    Compare the name and city columns of two Excel files.

    Args:
        master_file: Path to the master Excel file
        secondary_file: Path to the secondary Excel file
        output_file: Optional path for the results workbook
        fuzzy: Whether to use fuzzy matching
        threshold: Minimum similarity (0-100) for a fuzzy match
        worker_threads: Threads used to score rows in fuzzy mode

    Returns:
        ComparisonResult: Counts and per-row outcomes
    """
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )

        config = CompareConfig(
            master_columns=['Name', 'City'],
            secondary_columns=['Full Name', 'Town'],
            mode=CompareMode.FUZZY if fuzzy else CompareMode.EXACT,
            threshold=threshold
        )
        matcher = create_name_matcher(worker_threads=worker_threads)

        logging.info("Starting comparison...")
        result = excel_io.compare_excel_files(master_file, secondary_file, config, matcher)

        logging.info("\nComparison Statistics:")
        logging.info(f"Total rows: {result.total_rows}")
        if result.total_rows:
            logging.info(
                f"Matched rows: {result.matched_rows} "
                f"({result.matched_rows / result.total_rows * 100:.1f}%)"
            )

        if result.threshold is not None:
            near_misses = [
                row for row in result.unmatched()
                if row.similarity_score is not None
                and row.similarity_score >= result.threshold - 10
            ]
            logging.info(f"Near misses within 10 points: {len(near_misses)}")
            for row in near_misses[:10]:
                logging.info(
                    f"- row {row.row_index}: score={row.similarity_score:.1f} "
                    f"{row.per_column_similarity}"
                )

        if output_file:
            excel_io.export_results(result, output_file)

        return result

    except Exception as e:
        logging.error(f"An error occurred: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    master_file = Path('data/master.xlsx')
    secondary_file = Path('data/secondary.xlsx')
    output_file = Path('data/comparison_result.xlsx')

    compare_excel_files(
        master_file=master_file,
        secondary_file=secondary_file,
        output_file=output_file,
        fuzzy=True,
        threshold=85.0,
        worker_threads=4
    )
