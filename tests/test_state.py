# File: tests/test_state.py
import json

from speed_scout.checker.models import FailureResult, Strategy, SuccessResult
from speed_scout.state import RunState, StateStore


def _ok(url: str, strategy: Strategy = Strategy.MOBILE, perf: int = 90) -> SuccessResult:
    return SuccessResult(
        url=url,
        strategy=strategy,
        performance_score=perf,
        accessibility_score=80,
        best_practices_score=70,
        seo_score=100,
        fcp="1.0 s",
        timestamp="2024-01-01T00:00:00+00:00",
    )


def _ko(url: str, strategy: Strategy = Strategy.DESKTOP) -> FailureResult:
    return FailureResult(url=url, strategy=strategy, error="API rate limit exceeded", timestamp="t")


def test_load_missing_file_gives_empty_state(tmp_path):
    state = StateStore(tmp_path / "nope.json").load()
    assert state.processed_keys == set()
    assert state.results == []


def test_load_corrupt_file_gives_empty_state(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    assert StateStore(path).load().results == []

    path.write_text(json.dumps({"processed": "x", "results": []}), encoding="utf-8")
    assert StateStore(path).load().processed_keys == set()

    path.write_text(json.dumps({"processed": [], "results": [{"url": "u", "status": "weird"}]}))
    assert StateStore(path).load().results == []


def test_round_trip(tmp_path):
    store = StateStore(tmp_path / "sub" / "state.json")
    state = RunState()
    records = [_ok("https://example.com/a/"), _ko("https://example.com/b"), _ok("https://example.com/c", perf=10)]
    for r in records:
        store.record(state, r)

    assert store.save(state) is True
    loaded = store.load()

    assert loaded.processed_keys == state.processed_keys
    assert loaded.results == records
    assert loaded.last_updated == state.last_updated


def test_file_format(tmp_path):
    path = tmp_path / "state.json"
    store = StateStore(path)
    state = RunState()
    store.record(state, _ok("https://Example.com/a/"))
    store.save(state)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["processed"] == ["https://example.com/a|mobile"]
    assert data["results"][0]["url"] == "https://Example.com/a/"
    assert data["results"][0]["status"] == "success"
    assert "last_updated" in data


def test_merge_keeps_previous_results_first(tmp_path):
    store = StateStore(tmp_path / "state.json")
    r1, r2, r3, r4 = (_ok(f"https://example.com/{n}", perf=p) for n, p in (("1", 10), ("2", 99), ("3", 50), ("4", 100)))

    state = RunState()
    store.record(state, r1)
    store.record(state, r2)
    store.save(state)

    resumed = store.load()
    store.record(resumed, r3)
    store.record(resumed, r4)
    store.save(resumed)

    assert store.load().results == [r1, r2, r3, r4]


def test_processed_lookup_uses_normalized_url(tmp_path):
    store = StateStore(tmp_path / "state.json")
    state = RunState()
    store.mark_processed(state, "https://EXAMPLE.com/a/", Strategy.MOBILE)
    store.mark_processed(state, "https://example.com/a", Strategy.MOBILE)

    assert len(state.processed_keys) == 1
    assert store.is_processed(state, "https://example.com/a", "mobile")
    assert not store.is_processed(state, "https://example.com/a", Strategy.DESKTOP)
    assert not store.is_complete(state, "https://example.com/a", [Strategy.MOBILE, Strategy.DESKTOP])


def test_processed_lookup_without_normalization(tmp_path):
    store = StateStore(tmp_path / "state.json", normalize=False)
    state = RunState()
    store.mark_processed(state, "https://example.com/a/", Strategy.MOBILE)
    assert not store.is_processed(state, "https://example.com/a", Strategy.MOBILE)


def test_save_failure_is_soft(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    store = StateStore(blocker / "state.json")
    state = RunState()
    store.record(state, _ok("https://example.com/"))

    assert store.save(state) is False
    assert len(state.results) == 1


def test_reset(tmp_path):
    path = tmp_path / "state.json"
    store = StateStore(path)
    assert store.reset() is False
    store.save(RunState())
    assert store.reset() is True
    assert not path.exists()


def test_processed_url_count():
    state = RunState(processed_keys={"a|mobile", "a|desktop", "b|mobile", "b|desktop"})
    assert StateStore.processed_url_count(state, [Strategy.MOBILE, Strategy.DESKTOP]) == 2
