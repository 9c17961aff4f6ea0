"""Value coercion and key building for record comparison."""

from typing import Any, List, Optional, Protocol, Sequence
from abc import ABC, abstractmethod
import numpy as np
import pandas as pd

from config.models import Record

DEFAULT_KEY_DELIMITER = '|||'


class Preprocessor(Protocol):
    """Protocol defining the interface for preprocessors."""
    def process(self, value: Any) -> str:
        """Process a value into a standardized string format."""
        ...


def to_text(value: Any) -> str:
    """
    Coerce a cell value to text.

    Missing, None and NaN cells become the empty string. Integral floats
    lose their fractional part, so an integer column that pandas upcast to
    float because of a blank cell still reads ``5`` rather than ``5.0``.
    Every other value is passed through ``str``.
    """
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return ''
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


class BasePreprocessor(ABC):
    """Base class for preprocessors with common functionality."""

    @abstractmethod
    def process(self, value: Any) -> str:
        """Process a value into a standardized string format."""
        pass


class RawPreprocessor(BasePreprocessor):
    """Stringifies values without any normalization."""

    def process(self, value: Any) -> str:
        return to_text(value)


class KeyPreprocessor(BasePreprocessor):
    """Normalizes values for exact key comparison."""

    def __init__(self, case_sensitive: bool = False, trim_whitespace: bool = True):
        self.case_sensitive = case_sensitive
        self.trim_whitespace = trim_whitespace

    def process(self, value: Any) -> str:
        text = to_text(value)
        if not self.case_sensitive:
            text = text.lower()
        if self.trim_whitespace:
            text = text.strip()
        return text


def selected_values(
    record: Record,
    columns: Sequence[str],
    preprocessor: Optional[Preprocessor] = None
) -> List[str]:
    """
    Read the selected columns of a record as text.

    Args:
        record: Record to read from
        columns: Ordered column names; missing columns read as blank
        preprocessor: Optional normalization applied to each value

    Returns:
        List[str]: One string per selected column
    """
    preprocessor = preprocessor or RawPreprocessor()
    return [preprocessor.process(record.get(col)) for col in columns]


def build_key(
    record: Record,
    columns: Sequence[str],
    preprocessor: Preprocessor,
    delimiter: str = DEFAULT_KEY_DELIMITER
) -> str:
    """
    Build the comparable key for a record.

    Column values are joined with a multi-character delimiter so that
    boundaries cannot collide, e.g. ``["a", "bc"]`` and ``["ab", "c"]``
    produce different keys.
    """
    return delimiter.join(selected_values(record, columns, preprocessor))
