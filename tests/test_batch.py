# File: tests/test_batch.py
import pytest

from speed_scout.batch import select_batch

URLS = [f"https://example.com/p{i}" for i in range(30)]


@pytest.mark.parametrize(
    "batch_size,max_urls,expected_len,expected_remaining",
    [
        (None, None, 30, 0),
        (10, None, 10, 20),
        (10, 5, 5, 25),
        (None, 7, 7, 23),
        (50, None, 30, 0),
        (5, 10, 5, 25),
    ],
)
def test_select_batch(batch_size, max_urls, expected_len, expected_remaining):
    batch, remaining = select_batch(URLS, batch_size, max_urls)
    assert len(batch) == expected_len
    assert remaining == expected_remaining
    assert batch == URLS[:expected_len]


def test_empty_candidates():
    assert select_batch([], 10, 5) == ([], 0)


def test_input_is_not_mutated():
    candidates = list(URLS)
    select_batch(candidates, 3, 2)
    assert candidates == URLS
