"""Shared fixtures for the comparison tests."""

import pytest

from config.models import EngineSettings
from core.matcher import RecordMatcher


@pytest.fixture
def events():
    """List collecting every progress event of a run."""
    return []


@pytest.fixture
def matcher(events):
    """Matcher with a small progress chunk that records its events."""
    return RecordMatcher(
        settings=EngineSettings(chunk_size=2),
        progress_callback=events.append
    )


@pytest.fixture
def people():
    """Master records with a few phonetically distinct names."""
    return [
        {'Name': 'John Smith', 'City': 'Boston'},
        {'Name': 'Catherine Jones', 'City': 'Denver'},
        {'Name': 'Michael Brown', 'City': 'Austin'},
        {'Name': 'Sarah Connor', 'City': 'Los Angeles'},
        {'Name': 'Philip Marlowe', 'City': 'Chicago'},
    ]


@pytest.fixture
def applicants():
    """Secondary records: exact, misspelled and unknown names."""
    return [
        {'Full Name': 'John Smith', 'Town': 'Boston'},
        {'Full Name': 'Jon Smith', 'Town': 'Boston'},
        {'Full Name': 'Phillip Marlowe', 'Town': 'Chicago'},
        {'Full Name': 'Sara Conner', 'Town': 'Los Angeles'},
        {'Full Name': 'Zygmunt Wojcik', 'Town': 'Krakow'},
        {'Full Name': '', 'Town': ''},
    ]
