"""Phonetic codes used to bucket records before fuzzy scoring."""

from typing import List, Sequence, Tuple
import regex as re

from config.models import Record
from core.preprocessor import selected_values

# Applied in order; later rules see the output of earlier ones
METAPHONE_RULES: List[Tuple["re.Pattern", str]] = [
    (re.compile(r'^KN'), 'N'),
    (re.compile(r'^GN'), 'N'),
    (re.compile(r'^PN'), 'N'),
    (re.compile(r'^WR'), 'R'),
    (re.compile(r'^WH'), 'W'),
    (re.compile(r'X'), 'K'),
    (re.compile(r'Q'), 'K'),
    (re.compile(r'C([EIY])'), r'S\1'),
    (re.compile(r'CH'), 'X'),
    (re.compile(r'C'), 'K'),
    (re.compile(r'DG[EIY]'), 'J'),
    (re.compile(r'PH'), 'F'),
    (re.compile(r'H([^AEIOU])'), r'\1'),
    (re.compile(r'G([^EY])'), r'K\1'),
    (re.compile(r'S([IO])'), r'X\1'),
    (re.compile(r'SH'), 'X'),
    (re.compile(r'T([IO])'), r'X\1'),
    (re.compile(r'TH'), '0'),
    (re.compile(r'V'), 'F'),
    (re.compile(r'Z'), 'S'),
]

VOWELS = frozenset('AEIOU')

SOUNDEX_CODES = {
    **dict.fromkeys('BFPV', '1'),
    **dict.fromkeys('CGJKQSXZ', '2'),
    **dict.fromkeys('DT', '3'),
    'L': '4',
    **dict.fromkeys('MN', '5'),
    'R': '6',
}

SOUNDEX_LENGTH = 4


def metaphone(text: str) -> str:
    """
    Approximate English pronunciation code.

    A simplified Metaphone: ordered substitution rules followed by
    collapsing repeated letters and dropping vowels after the first
    character.
    """
    if not text:
        return ''

    current = text.strip().upper()
    for pattern, replacement in METAPHONE_RULES:
        current = pattern.sub(replacement, current)

    result = []
    previous = ''
    for i, char in enumerate(current):
        if char != previous and (i == 0 or char not in VOWELS):
            result.append(char)
        previous = char
    return ''.join(result)


def soundex(text: str) -> str:
    """
    Four character Soundex code: first letter plus three digit classes.

    Letters without a class (vowels, H, W, Y) are skipped without breaking
    a run, so a class repeated across them is still written once.
    """
    if not text:
        return ''

    s = text.strip().upper()
    if not s:
        return '0' * SOUNDEX_LENGTH

    result = s[0]
    previous_code = SOUNDEX_CODES.get(s[0], '')
    for char in s[1:]:
        code = SOUNDEX_CODES.get(char, '')
        if not code or code == previous_code:
            continue
        result += code
        previous_code = code

    return result.ljust(SOUNDEX_LENGTH, '0')[:SOUNDEX_LENGTH]


def phonetic_key_for_values(values: Sequence[str]) -> str:
    """Combined ``metaphone|soundex`` code of space-joined values."""
    joined = ' '.join(values)
    return f"{metaphone(joined)}|{soundex(joined)}"


def phonetic_key(record: Record, columns: Sequence[str]) -> str:
    """Bucket key for a record over the selected (unnormalized) columns."""
    return phonetic_key_for_values(selected_values(record, columns))
