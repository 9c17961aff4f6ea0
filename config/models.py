"""Configuration models for the record comparison system."""

import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
from enum import Enum

from core.errors import InvalidArgumentError

Record = Mapping[str, Any]


class CompareMode(str, Enum):
    """How secondary records are compared against the master set."""
    EXACT = "exact"
    FUZZY = "fuzzy"


class ProgressStage(str, Enum):
    """Stages reported to the progress sink."""
    PARSING = "parsing"
    BUILDING_INDEX = "building-index"
    COMPARING = "comparing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class EngineSettings:
    """Tuning knobs for the matching engines."""
    chunk_size: int = 10000  # Records between progress events
    fallback_sample_size: int = 100
    key_delimiter: str = '|||'
    worker_threads: int = 1
    parse_band: Tuple[int, int] = (0, 30)
    index_band: Tuple[int, int] = (30, 50)
    compare_band: Tuple[int, int] = (50, 100)

    def __post_init__(self):
        if self.chunk_size < 1:
            raise InvalidArgumentError("chunk_size must be positive")
        if self.fallback_sample_size < 1:
            raise InvalidArgumentError("fallback_sample_size must be positive")
        if not self.key_delimiter:
            raise InvalidArgumentError("key_delimiter must not be empty")
        object.__setattr__(self, 'worker_threads', max(1, self.worker_threads))


@dataclass(frozen=True)
class CompareConfig:
    """Column pairing and mode for a single comparison run."""
    master_columns: Sequence[str]
    secondary_columns: Sequence[str]
    mode: CompareMode = CompareMode.EXACT
    threshold: float = 85.0
    case_sensitive: bool = False
    trim_whitespace: bool = True

    def __post_init__(self):
        """Freeze column selections and coerce the mode."""
        for name in ('master_columns', 'secondary_columns'):
            columns = getattr(self, name)
            if isinstance(columns, str):
                raise InvalidArgumentError(
                    f"{name} must be a list of column names, not the string {columns!r}"
                )
            object.__setattr__(self, name, tuple(columns) if columns is not None else ())
        if not isinstance(self.mode, CompareMode):
            try:
                object.__setattr__(self, 'mode', CompareMode(str(self.mode).lower()))
            except ValueError:
                raise InvalidArgumentError(f"Unknown comparison mode: {self.mode}")

    @property
    def is_fuzzy(self) -> bool:
        return self.mode is CompareMode.FUZZY

    def similarity_keys(self) -> Tuple[str, ...]:
        """
        Labels for per-column similarity scores, one per column pair.

        A secondary column name is used as is unless it is paired more than
        once, in which case its position is appended (``Name[0]``).
        """
        return tuple(
            column if self.secondary_columns.count(column) == 1 else f"{column}[{i}]"
            for i, column in enumerate(self.secondary_columns)
        )

    def validate(self) -> None:
        """
        Check the column pairing and threshold.

        Raises:
            InvalidArgumentError: If a column list is empty, the lists differ
                in length, or a fuzzy threshold falls outside [0, 100]
        """
        if not self.master_columns or not self.secondary_columns:
            raise InvalidArgumentError(
                "At least one column must be selected from each dataset"
            )
        if len(self.master_columns) != len(self.secondary_columns):
            raise InvalidArgumentError(
                f"Column selections must have the same length "
                f"(master={len(self.master_columns)}, "
                f"secondary={len(self.secondary_columns)})"
            )
        for column in self.master_columns + self.secondary_columns:
            if not isinstance(column, str):
                raise InvalidArgumentError(f"Column names must be strings, got {column!r}")
        if self.is_fuzzy:
            if isinstance(self.threshold, bool) or not isinstance(self.threshold, numbers.Real):
                raise InvalidArgumentError("Similarity threshold must be a number")
            if not 0 <= self.threshold <= 100:
                raise InvalidArgumentError(
                    "Similarity threshold must be between 0 and 100"
                )


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification."""
    stage: ProgressStage
    current: int
    total: int
    message: str


@dataclass(frozen=True)
class RowOutcome:
    """Classification of one secondary record."""
    row_index: int  # 1-based position in the secondary set
    matched: bool
    data: Record
    similarity_score: Optional[float] = None
    per_column_similarity: Optional[Dict[str, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'row': self.row_index,
            'matched': self.matched,
            'data': dict(self.data),
        }
        if self.similarity_score is not None:
            result['similarity_score'] = self.similarity_score
            result['per_column_similarity'] = dict(self.per_column_similarity or {})
        return result


@dataclass
class ComparisonResult:
    """Aggregate counts plus the per-row outcomes in secondary order."""
    total_rows: int
    matched_rows: int
    unmatched_rows: int
    mode: CompareMode
    rows: Tuple[RowOutcome, ...] = ()
    threshold: Optional[float] = None
    master_columns: Tuple[str, ...] = ()
    secondary_columns: Tuple[str, ...] = ()
    elapsed_seconds: float = 0.0

    @classmethod
    def from_outcomes(
        cls,
        outcomes: Sequence[RowOutcome],
        config: CompareConfig,
        elapsed_seconds: float = 0.0
    ) -> 'ComparisonResult':
        """Build a result, deriving the counts from the outcomes."""
        matched = sum(1 for outcome in outcomes if outcome.matched)
        return cls(
            total_rows=len(outcomes),
            matched_rows=matched,
            unmatched_rows=len(outcomes) - matched,
            mode=config.mode,
            rows=tuple(outcomes),
            threshold=float(config.threshold) if config.is_fuzzy else None,
            master_columns=tuple(config.master_columns),
            secondary_columns=tuple(config.secondary_columns),
            elapsed_seconds=elapsed_seconds
        )

    def matched(self) -> Iterator[RowOutcome]:
        return (row for row in self.rows if row.matched)

    def unmatched(self) -> Iterator[RowOutcome]:
        return (row for row in self.rows if not row.matched)

    def summary(self) -> Dict[str, Any]:
        """Counts and settings without the row data."""
        return {
            'total_rows': self.total_rows,
            'matched_rows': self.matched_rows,
            'unmatched_rows': self.unmatched_rows,
            'comparison_method': self.mode.value,
            'similarity_threshold': self.threshold,
            'master_columns': list(self.master_columns),
            'secondary_columns': list(self.secondary_columns),
        }


@dataclass(frozen=True)
class FilePreview:
    """Lightweight metadata about a record set."""
    total_rows: int
    columns: List[str] = field(default_factory=list)
    sample_rows: List[Dict[str, Any]] = field(default_factory=list)
