"""Reading record sets from Excel files and exporting comparison results."""

import logging
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

import pandas as pd

from config.models import CompareConfig, ComparisonResult, FilePreview, ProgressStage
from core.errors import InvalidArgumentError
from core.matcher import RecordMatcher, preview_first_rows
from core.progress import ProgressReporter, ProgressSink

logger = logging.getLogger(__name__)

ExcelSource = Union[str, Path, BinaryIO]

EXCEL_SUFFIXES = ('.xlsx', '.xls')
RESULT_SHEET_NAME = 'Comparison Results'
MATCH_STATUS_COLUMN = 'MATCH_STATUS'
SIMILARITY_COLUMN = 'SIMILARITY_SCORE'


def _check_suffix(source: ExcelSource) -> None:
    if isinstance(source, (str, Path)) and Path(source).suffix.lower() not in EXCEL_SUFFIXES:
        raise InvalidArgumentError(
            f"Invalid file format: {source}. Please use an Excel file (.xlsx or .xls)"
        )


def read_records(source: ExcelSource, sheet_name: Union[int, str] = 0) -> List[Dict[str, Any]]:
    """
    Read one sheet as records.

    Args:
        source: Path or binary file object of an Excel workbook
        sheet_name: Sheet to read, the first one by default

    Returns:
        List[Dict[str, Any]]: One dict per row, blank cells as ''
    """
    _check_suffix(source)
    logger.info(f"Reading Excel file: {source}")
    df = pd.read_excel(source, sheet_name=sheet_name, dtype=str).fillna('')
    return df.to_dict('records')


def preview_excel_file(source: ExcelSource, n: int = 3) -> FilePreview:
    """Row count, columns and leading rows of the first sheet."""
    return preview_first_rows(read_records(source), n)


def compare_excel_files(
    master_source: ExcelSource,
    secondary_source: ExcelSource,
    config: CompareConfig,
    matcher: Optional[RecordMatcher] = None,
    progress_callback: Optional[ProgressSink] = None
) -> ComparisonResult:
    """
    Parse two workbooks and compare them.

    Parsing is reported in the first progress band before the matcher
    takes over.
    """
    config.validate()
    matcher = matcher or RecordMatcher()
    sink = progress_callback or matcher.progress_callback
    reporter = ProgressReporter(sink)
    parse_start, parse_end = matcher.settings.parse_band

    reporter.emit(ProgressStage.PARSING, parse_start, "Parsing master file...")
    master_records = read_records(master_source)

    reporter.emit(
        ProgressStage.PARSING,
        parse_start + (parse_end - parse_start) * 2 // 3,
        "Parsing secondary file..."
    )
    secondary_records = read_records(secondary_source)

    return matcher.compare(master_records, secondary_records, config, sink)


def results_to_dataframe(result: ComparisonResult) -> pd.DataFrame:
    """
    Secondary rows with their match status.

    Column order follows the first secondary row; fuzzy results also carry
    the best similarity score found for each row.
    """
    if not result.rows:
        return pd.DataFrame()

    columns = list(result.rows[0].data.keys())
    rows = []
    for outcome in result.rows:
        row = {col: outcome.data.get(col, '') for col in columns}
        row[MATCH_STATUS_COLUMN] = 'Matched' if outcome.matched else 'Unmatched'
        if result.threshold is not None:
            row[SIMILARITY_COLUMN] = (
                round(outcome.similarity_score, 2)
                if outcome.similarity_score is not None else None
            )
        rows.append(row)
    return pd.DataFrame(rows)


def export_results(result: ComparisonResult, output_file: Union[str, Path]) -> Path:
    """
    Write the comparison results to an xlsx workbook.

    Returns:
        Path: The written file
    """
    output_file = Path(output_file)
    logger.info(f"Saving results to: {output_file}")
    with pd.ExcelWriter(
        output_file,
        engine='xlsxwriter',
        engine_kwargs={'options': {'strings_to_urls': False}}
    ) as writer:
        results_to_dataframe(result).to_excel(
            writer, sheet_name=RESULT_SHEET_NAME, index=False
        )
    return output_file
