"""
Record Comparison
=================

Compares a secondary set of tabular records against a master set on a
chosen subset of columns and classifies every secondary row as matched
or unmatched.

Key Features:
- Exact matching through a hash index, linear in the size of both sets
- Fuzzy matching with phonetic pre-filtering and Jaro-Winkler scoring
- Case and whitespace normalization of compared values
- Progress reporting through an injected callback
- Excel import, preview and export of results
"""

from core.matcher import RecordMatcher, compare, preview_first_rows
from core.errors import InvalidArgumentError, ResourceExhaustedError

from config.models import (
    CompareConfig,
    CompareMode,
    ComparisonResult,
    EngineSettings,
    ProgressEvent,
    ProgressStage,
    RowOutcome
)

__version__ = "1.0.0"
