import pytest

from logfzf.interactive_viewing import rank_matches

CANDIDATES = [
    "2023-07-14 08:00:06 INFO   User authentication failed",
    "2023-07-14 08:00:04 ERROR  Request processed unsuccessfully",
    "2023-07-14 08:00:01 WARN   Connection lost due to timeout",
    "2023-07-14 07:59:58 ERROR  Failed to connect to remote server",
]


@pytest.mark.parametrize("query", ["", "   "])
def test_empty_query_keeps_record_order(query):
    assert rank_matches(query, CANDIDATES) == [0, 1, 2, 3]


def test_query_selects_matching_records():
    matches = rank_matches("error", CANDIDATES)
    assert sorted(matches) == [1, 3]


def test_fuzzy_query_matches_subsequence():
    # "tmout" is not a substring, but its letters appear in order in "timeout"
    assert rank_matches("tmout", CANDIDATES) == [2]


def test_query_without_matches():
    assert rank_matches("zzzz", CANDIDATES) == []
