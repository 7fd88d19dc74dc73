import asyncio
import json
from datetime import timedelta

import pytest

from conftest import NOW, FakeGenerator, FakeNewsClient, news
from rootbyte.core.article import BreakingRecord
from rootbyte.core.breaking import BreakingNewsManager, detect_spike, is_expired
from rootbyte.core.errors import ConfigError
from rootbyte.utils.nlp import isoformat, parse_isoformat

INACTIVE = {
    "active": False, "headline": "", "short": "", "category": "tech",
    "timestamp": "", "link": "breaking.html", "expires": "", "body": "",
}

OPENAI_BATCH = [
    news("OpenAI raises funding - Reuters", "The ChatGPT maker closes a round."),
    news("OpenAI unveils Sora update"),
    news("OpenAI hires new CFO"),
    news("OpenAI opens Tokyo office"),
    news("Nintendo reveals console"),
]


class TestDetectSpike:
    def test_four_of_five_mention_openai(self):
        spike = detect_spike(OPENAI_BATCH)
        assert spike.keyword == "openai"
        assert spike.count == 4

    def test_below_threshold_is_no_spike(self):
        assert detect_spike(OPENAI_BATCH[1:4]) is None
        assert detect_spike([]) is None

    def test_tie_goes_to_first_seen_keyword(self):
        items = [news("Google and Apple team up") for _ in range(4)]
        assert detect_spike(items).keyword == "google"

    def test_strictly_largest_bucket_wins(self):
        items = [news("Google and Apple team up") for _ in range(4)] + [news("Apple earnings")]
        spike = detect_spike(items)
        assert spike.keyword == "apple"
        assert spike.count == 5

    def test_description_counts_and_substring_matching(self):
        items = [news("Fire alarm recall", "Smart alarm firmware") for _ in range(4)]
        # "arm" is matched inside "alarm"
        assert detect_spike(items).keyword == "arm"

    def test_custom_threshold(self):
        assert detect_spike(OPENAI_BATCH[:2], threshold=2).keyword == "openai"


def _manager(tmp_path, client=None, generator=None, **kwargs):
    return BreakingNewsManager(
        path=tmp_path / "breaking.json",
        news_client=client or FakeNewsClient(OPENAI_BATCH),
        summary_generator=generator or FakeGenerator(),
        now=lambda: NOW,
        **kwargs,
    )


def _read(tmp_path):
    return json.loads((tmp_path / "breaking.json").read_text())


def _write(tmp_path, data):
    (tmp_path / "breaking.json").write_text(json.dumps(data))


def _active(**overrides):
    record = {
        "active": True, "headline": "BREAKING: Old story", "short": "Old", "category": "tech",
        "timestamp": "2026-10-19T08:00:00.000Z", "link": "breaking.html",
        "expires": "2026-10-19T20:00:00.000Z", "body": "<p>Old</p>",
        "spike_keyword": "google", "spike_count": 6,
    }
    record.update(overrides)
    return record


class TestBreakingNewsManager:
    def test_expired_record_is_deactivated_regardless_of_news(self, tmp_path):
        _write(tmp_path, _active(expires="2020-01-01T00:00:00Z"))
        client = FakeNewsClient(OPENAI_BATCH)
        manager = _manager(tmp_path, client=client)

        assert asyncio.run(manager.check()) == 0

        assert _read(tmp_path) == INACTIVE
        assert client.calls == []

    @pytest.mark.parametrize("overrides", [
        {"expires": ""},
        {"expires": None},
        {"headline": "  "},
    ])
    def test_malformed_active_record_is_deactivated(self, tmp_path, overrides):
        _write(tmp_path, _active(**overrides))
        client = FakeNewsClient([news("Quiet day")])

        assert asyncio.run(_manager(tmp_path, client=client).check()) == 0

        assert _read(tmp_path) == INACTIVE
        assert client.calls == []

    def test_spike_activates_banner(self, tmp_path):
        generator = FakeGenerator()
        manager = _manager(tmp_path, generator=generator)

        assert asyncio.run(manager.check()) == 0

        record = _read(tmp_path)
        assert record["active"] is True
        assert record["headline"] == "BREAKING: OpenAI raises funding"
        assert record["short"] == "The ChatGPT maker closes a round."
        assert record["body"] == "<p>Generated brief.</p>"
        assert record["spike_keyword"] == "openai"
        assert record["spike_count"] == 4
        assert record["timestamp"] == isoformat(NOW)
        assert parse_isoformat(record["expires"]) == NOW + timedelta(hours=12)
        assert generator.body_calls[0][0] == "BREAKING: OpenAI raises funding"
        assert len(generator.body_calls[0][1]) == 4

    def test_no_spike_while_inactive_skips_write(self, tmp_path):
        manager = _manager(tmp_path, client=FakeNewsClient(OPENAI_BATCH[1:3]))

        assert asyncio.run(manager.check()) == 0

        assert not (tmp_path / "breaking.json").exists()
        assert manager.last_written is None

    def test_no_spike_keeps_unexpired_story(self, tmp_path):
        _write(tmp_path, _active())
        manager = _manager(tmp_path, client=FakeNewsClient([news("Quiet day")]))

        asyncio.run(manager.check())

        assert _read(tmp_path) == _active()

    def test_active_story_is_replaced_by_default(self, tmp_path):
        _write(tmp_path, _active())
        manager = _manager(tmp_path)

        asyncio.run(manager.check())

        assert _read(tmp_path)["spike_keyword"] == "openai"

    def test_stronger_policy_keeps_bigger_story(self, tmp_path):
        _write(tmp_path, _active())
        manager = _manager(tmp_path, replace_policy="stronger")

        asyncio.run(manager.check())

        assert _read(tmp_path) == _active()

    def test_stronger_policy_replaces_weaker_story(self, tmp_path):
        _write(tmp_path, _active(spike_count=4, spike_keyword="google"))
        manager = _manager(tmp_path, replace_policy="stronger")

        asyncio.run(manager.check())

        assert _read(tmp_path)["spike_keyword"] == "openai"

    def test_fetch_failure_exits_nonzero_and_leaves_state(self, tmp_path):
        _write(tmp_path, _active())
        manager = _manager(tmp_path, client=FakeNewsClient(ok=False))

        assert asyncio.run(manager.check()) == 1
        assert _read(tmp_path) == _active()

    def test_missing_key_skips_check(self, tmp_path):
        client = FakeNewsClient(OPENAI_BATCH, configured=False)
        manager = _manager(tmp_path, client=client)

        assert asyncio.run(manager.check()) == 0
        assert client.calls == []
        assert not (tmp_path / "breaking.json").exists()

    def test_dry_run_writes_nothing(self, tmp_path):
        manager = _manager(tmp_path, dry_run=True)

        asyncio.run(manager.check())

        assert not (tmp_path / "breaking.json").exists()
        assert manager.last_written.active is True

    def test_clear_forces_inactive_shape(self, tmp_path):
        manager = _manager(tmp_path)
        manager.clear()
        assert _read(tmp_path) == INACTIVE

    def test_set_manual(self, tmp_path):
        manager = _manager(tmp_path)
        manager.set_manual("Chip plant fire halts production")

        record = _read(tmp_path)
        assert record["active"] is True
        assert record["headline"] == "Chip plant fire halts production"
        assert record["body"].startswith("<p>Chip plant fire halts production</p>")
        assert "spike_keyword" not in record
        assert parse_isoformat(record["expires"]) > NOW

    def test_set_manual_rejects_blank_headline(self, tmp_path):
        with pytest.raises(ValueError):
            _manager(tmp_path).set_manual("   ")

    def test_corrupt_file_is_treated_as_inactive(self, tmp_path):
        (tmp_path / "breaking.json").write_text("[oops")
        assert _manager(tmp_path).load() == BreakingRecord.inactive()


def test_inactive_record_has_one_shape():
    assert BreakingRecord.inactive().to_dict() == INACTIVE
    assert BreakingRecord.from_dict({"active": False, "headline": "left over"}).to_dict() == INACTIVE


def test_is_expired():
    record = BreakingRecord.from_dict(_active())
    assert not is_expired(record, NOW)
    assert is_expired(record, NOW + timedelta(hours=9))
    assert not is_expired(BreakingRecord.inactive(), NOW)
    assert is_expired(BreakingRecord(active=True, headline="BREAKING: stale"), NOW)
    assert is_expired(BreakingRecord.from_dict(_active(expires="next week")), NOW)


def test_unknown_replace_policy_is_rejected(tmp_path):
    with pytest.raises(ConfigError):
        _manager(tmp_path, replace_policy="sometimes")
