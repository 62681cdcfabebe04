from __future__ import annotations

import pytest

from rawgraph.config import merge_panel_defaults
from rawgraph.models import RawDocument
from rawgraph.series import demux as demux_module
from rawgraph.series.demux import demultiplex


def _doc(**source) -> RawDocument:
    return RawDocument.from_hit({"_source": source})


def _config(*series, time_field: str = "ts", **extra):
    return merge_panel_defaults({"time_field": time_field, "series": list(series), **extra})


def test_two_documents_single_series():
    docs = [
        _doc(ts="2020-01-01T00:00:00Z", cpu=10),
        _doc(ts="2020-01-01T00:01:00Z", cpu=20),
    ]
    (series,) = demultiplex(docs, _config({"value_field": "cpu"}))
    assert series.as_pairs() == [[1577836800000, 10], [1577836860000, 20]]
    assert series.hit_count == 2
    assert series.label == "cpu"
    assert series.color == "#86B22D"


def test_demultiplex_is_idempotent():
    docs = [_doc(ts="2020-01-01T00:00:00Z", cpu=1, mem=2), _doc(ts="2020-01-01T00:00:05Z", mem=3)]
    config = _config({"value_field": "cpu"}, {"value_field": "mem"})
    assert demultiplex(docs, config) == demultiplex(docs, config)


def test_document_feeds_several_series():
    docs = [_doc(ts="2020-01-01T00:00:00Z", cpu=1, mem=2), _doc(ts="2020-01-01T00:00:05Z", mem=3)]
    cpu, mem = demultiplex(docs, _config({"value_field": "cpu"}, {"value_field": "mem"}))
    assert cpu.as_pairs() == [[1577836800000, 1]]
    assert mem.as_pairs() == [[1577836800000, 2], [1577836805000, 3]]
    assert (cpu.hit_count, mem.hit_count) == (1, 2)


def test_missing_time_field_or_non_numeric_value_never_contributes():
    docs = [
        _doc(cpu=5),
        _doc(ts=None, cpu=5),
        _doc(ts=1577836800000, cpu=5),
        _doc(ts="not a date", cpu=5),
        _doc(ts="2020-01-01T00:00:00Z", cpu="5"),
        _doc(ts="2020-01-01T00:00:00Z", cpu=True),
        _doc(ts="2020-01-01T00:00:00Z", cpu=None),
    ]
    (series,) = demultiplex(docs, _config({"value_field": "cpu"}))
    assert series.points == ()
    assert series.hit_count == 0


def test_list_values_never_contribute():
    docs = [
        _doc(ts="2020-01-01T00:00:00Z", cpu=[42]),
        _doc(ts="2020-01-01T00:00:01Z", cpu=[1, 2]),
        _doc(ts="2020-01-01T00:00:02Z", cpu=7),
    ]
    (series,) = demultiplex(docs, _config({"value_field": "cpu"}))
    assert series.as_pairs() == [[1577836802000, 7]]
    assert series.hit_count == 1


def test_arrival_order_is_kept():
    docs = [_doc(ts="2020-01-01T00:02:00Z", cpu=3), _doc(ts="2020-01-01T00:01:00Z", cpu=2)]
    (series,) = demultiplex(docs, _config({"value_field": "cpu"}))
    assert [ts for ts, _ in series.points] == [1577836920000, 1577836860000]


def test_hidden_series_keep_their_color_slot():
    docs = [_doc(ts="2020-01-01T00:00:00Z", cpu=1, mem=2)]
    config = _config({"value_field": "cpu", "hide": True}, {"value_field": "mem"})
    (mem,) = demultiplex(docs, config)
    assert mem.label == "mem"
    assert mem.color == config.colors[1]


def test_series_without_value_field_is_empty():
    docs = [_doc(ts="2020-01-01T00:00:00Z", cpu=1)]
    (series,) = demultiplex(docs, _config({"value_field": None}))
    assert series.points == ()
    assert series.label is None


def test_nested_fields_are_addressed_by_dotted_name():
    docs = [RawDocument.from_hit({"_source": {"event": {"ts": "2020-01-01T00:00:00Z"}, "host": {"cpu": 4}}})]
    (series,) = demultiplex(docs, _config({"value_field": "host.cpu"}, time_field="event.ts"))
    assert series.as_pairs() == [[1577836800000, 4]]


def test_timestamp_parsed_once_per_document(monkeypatch: pytest.MonkeyPatch):
    calls: list[str] = []
    real_parse = demux_module.parse_timestamp

    def counting(value: str) -> int:
        calls.append(value)
        return real_parse(value)

    monkeypatch.setattr(demux_module, "parse_timestamp", counting)
    docs = [
        _doc(ts="2020-01-01T00:00:00Z", cpu=1, mem=2, disk=3),
        _doc(ts="2020-01-01T00:00:01Z", label="no numbers"),
    ]
    demultiplex(docs, _config({"value_field": "cpu"}, {"value_field": "mem"}, {"value_field": "disk"}))
    assert calls == ["2020-01-01T00:00:00Z"]
