"""Tests for the comparison facade and configuration checks."""

import numpy as np
import pandas as pd
import pytest

from config.models import CompareConfig, CompareMode, EngineSettings
from core.errors import InvalidArgumentError, ResourceExhaustedError
from core.matcher import RecordMatcher, compare, preview_first_rows


@pytest.mark.parametrize("mode", [CompareMode.EXACT, CompareMode.FUZZY])
def test_counts_add_up(mode, people, applicants):
    config = CompareConfig(
        master_columns=['Name'], secondary_columns=['Full Name'], mode=mode
    )
    result = compare(people, applicants, config)
    assert result.matched_rows + result.unmatched_rows == result.total_rows
    assert result.total_rows == len(applicants)


@pytest.mark.parametrize("mode", [CompareMode.EXACT, CompareMode.FUZZY])
def test_empty_master_any_mode(mode):
    config = CompareConfig(master_columns=['Name'], secondary_columns=['Name'], mode=mode)
    result = compare([], [{'Name': 'X'}], config)
    assert (result.matched_rows, result.unmatched_rows, result.total_rows) == (0, 1, 1)


def test_mismatched_columns_fail_before_any_work(matcher, events):
    config = CompareConfig(master_columns=['Name', 'City'], secondary_columns=['Name'])

    def secondary():
        raise AssertionError('records must not be read')
        yield

    with pytest.raises(InvalidArgumentError):
        matcher.compare([{'Name': 'a', 'City': 'b'}], secondary(), config)
    assert events == []


@pytest.mark.parametrize("master_columns, secondary_columns", [
    ([], ['Name']),
    (['Name'], []),
    ([], []),
    ('Name', 'Town'),
    (['Name'], 'Town'),
    (['Name'], [None]),
    ([1], ['Id']),
])
def test_invalid_column_selection_rejected(master_columns, secondary_columns):
    with pytest.raises(InvalidArgumentError):
        config = CompareConfig(
            master_columns=master_columns, secondary_columns=secondary_columns
        )
        compare([{'Name': 'Alice'}], [{'Town': 'Zzz'}, {'Town': 'Qqq'}], config)


@pytest.mark.parametrize("threshold", [-1, 100.5, 250])
def test_fuzzy_threshold_out_of_range(threshold):
    config = CompareConfig(['Name'], ['Name'], mode=CompareMode.FUZZY, threshold=threshold)
    with pytest.raises(InvalidArgumentError):
        compare([], [], config)


@pytest.mark.parametrize("threshold", [0, 100])
def test_fuzzy_threshold_bounds_accepted(threshold):
    config = CompareConfig(['Name'], ['Name'], mode=CompareMode.FUZZY, threshold=threshold)
    assert compare([], [], config).total_rows == 0


@pytest.mark.parametrize("threshold", [np.int64(90), np.float64(85.5)])
def test_numpy_thresholds_accepted(threshold):
    config = CompareConfig(['Name'], ['Name'], mode=CompareMode.FUZZY, threshold=threshold)
    result = compare([{'Name': 'Ann'}], [{'Name': 'Ann'}], config)
    assert result.matched_rows == 1
    assert result.threshold == float(threshold)


def test_upcast_integer_columns_still_match():
    # The blank cell turns the secondary Id column into floats
    master = pd.DataFrame({'Id': [5, 6]})
    secondary = pd.DataFrame({'Id': [5, None]})
    result = RecordMatcher().compare_dataframes(master, secondary, CompareConfig(['Id'], ['Id']))
    assert [row.matched for row in result.rows] == [True, False]


def test_threshold_ignored_in_exact_mode():
    config = CompareConfig(['Name'], ['Name'], threshold=250)
    assert compare([{'Name': 'a'}], [{'Name': 'A'}], config).matched_rows == 1


def test_mode_accepts_strings():
    assert CompareConfig(['a'], ['a'], mode='FUZZY').mode is CompareMode.FUZZY
    with pytest.raises(InvalidArgumentError):
        CompareConfig(['a'], ['a'], mode='phonetic')


def test_invalid_settings_rejected():
    with pytest.raises(InvalidArgumentError):
        EngineSettings(chunk_size=0)


def test_memory_error_is_reported_as_resource_exhaustion(monkeypatch):
    def run(self, master_records, secondary_records):
        raise MemoryError()

    monkeypatch.setattr('core.exact.ExactMatchEngine.run', run)
    config = CompareConfig(['Name'], ['Name'])
    with pytest.raises(ResourceExhaustedError):
        compare([{'Name': 'a'}], [{'Name': 'a'}], config)


def test_compare_dataframes_treats_missing_cells_as_blank():
    master = pd.DataFrame({'Name': ['John Doe', None], 'Age': [30, None]})
    secondary = pd.DataFrame({'Name': ['JOHN DOE', None, 'Jane']})
    config = CompareConfig(['Name'], ['Name'])
    result = RecordMatcher().compare_dataframes(master, secondary, config)
    assert [row.matched for row in result.rows] == [True, True, False]
    assert result.rows[1].data == {'Name': ''}


def test_summary_and_row_export():
    config = CompareConfig(['Name'], ['Name'], mode=CompareMode.FUZZY, threshold=90)
    result = compare([{'Name': 'Ann'}], [{'Name': 'Ann'}], config)
    assert result.summary() == {
        'total_rows': 1,
        'matched_rows': 1,
        'unmatched_rows': 0,
        'comparison_method': 'fuzzy',
        'similarity_threshold': 90.0,
        'master_columns': ['Name'],
        'secondary_columns': ['Name'],
    }
    assert result.rows[0].to_dict() == {
        'row': 1,
        'matched': True,
        'data': {'Name': 'Ann'},
        'similarity_score': 100.0,
        'per_column_similarity': {'Name': 100.0},
    }
    assert len(list(result.matched())) == 1
    assert list(result.unmatched()) == []


class TestPreview:
    """Record set previews."""

    def test_first_rows(self, people):
        preview = preview_first_rows(people)
        assert preview.total_rows == 5
        assert preview.columns == ['Name', 'City']
        assert preview.sample_rows == people[:3]

    def test_custom_row_count(self, people):
        assert len(preview_first_rows(people, n=1).sample_rows) == 1

    def test_empty(self):
        preview = preview_first_rows([])
        assert preview.total_rows == 0
        assert preview.columns == []
        assert preview.sample_rows == []

    def test_negative_count_rejected(self, people):
        with pytest.raises(InvalidArgumentError):
            preview_first_rows(people, n=-1)
