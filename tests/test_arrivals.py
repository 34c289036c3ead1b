from __future__ import annotations

import pytest

from pyseta.models.arrival import ArrivalService
from pyseta.reconcile.arrivals import compute_delay, minutes_of_day, reconcile_arrivals
from pyseta.rules.engine import RuleEngine
from pyseta.rules.store import build_rule_store


def _svc(trip: str, kind: str, time: str, **extra: object) -> ArrivalService:
    return ArrivalService.model_validate({"codice_corsa": trip, "type": kind, "arrival": time, **extra})


@pytest.fixture
def plain_engine() -> RuleEngine:
    return RuleEngine(build_rule_store({}))


def test_minutes_of_day() -> None:
    assert minutes_of_day("00:00") == 0
    assert minutes_of_day("10:05") == 605
    assert minutes_of_day("23:59") == 1439


def test_minutes_of_day_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        minutes_of_day("soon")


def test_compute_delay_signed() -> None:
    assert compute_delay("10:00", "10:05") == 5
    assert compute_delay("10:00", "09:58") == -2


def test_compute_delay_has_no_day_rollover() -> None:
    assert compute_delay("23:55", "00:05") == -1430


def test_realtime_replaces_planned_and_gets_delay(plain_engine: RuleEngine) -> None:
    result = reconcile_arrivals([_svc("X", "planned", "10:00"), _svc("X", "realtime", "10:05")], plain_engine)

    assert len(result) == 1
    assert result[0].type == "realtime"
    assert result[0].delay == 5


def test_planned_without_realtime_is_kept_unchanged(plain_engine: RuleEngine) -> None:
    result = reconcile_arrivals([_svc("Y", "planned", "09:00")], plain_engine)

    assert len(result) == 1
    assert result[0].type == "planned"
    assert result[0].delay is None
    assert "delay" not in result[0].to_payload()


def test_realtime_without_planned_has_no_delay(plain_engine: RuleEngine) -> None:
    result = reconcile_arrivals([_svc("Z", "realtime", "11:00")], plain_engine)
    assert result[0].delay is None


def test_input_order_is_preserved(plain_engine: RuleEngine) -> None:
    services = [
        _svc("A", "planned", "10:00"),
        _svc("B", "realtime", "10:03"),
        _svc("A", "realtime", "10:02"),
        _svc("C", "planned", "10:10"),
        _svc("B", "planned", "10:01"),
    ]
    result = reconcile_arrivals(services, plain_engine)

    assert [(s.codice_corsa, s.type) for s in result] == [("B", "realtime"), ("A", "realtime"), ("C", "planned")]
    assert [s.delay for s in result] == [2, 2, None]


def test_last_planned_record_wins_for_delay(plain_engine: RuleEngine) -> None:
    services = [
        _svc("X", "planned", "10:00"),
        _svc("X", "planned", "10:03"),
        _svc("X", "realtime", "10:05"),
    ]
    result = reconcile_arrivals(services, plain_engine)

    assert len(result) == 1
    assert result[0].delay == 2


def test_unparseable_time_leaves_delay_unset(plain_engine: RuleEngine) -> None:
    result = reconcile_arrivals([_svc("X", "planned", "--"), _svc("X", "realtime", "10:05")], plain_engine)
    assert result[0].delay is None


def test_arrival_rules_applied_before_dedup() -> None:
    engine = RuleEngine(
        build_rule_store(
            {
                "arrival_rules": [
                    {"conditions": {"codice_corsa": "OLD"}, "mutations": {"codice_corsa": "X"}},
                    {"conditions": {"service": "7"}, "mutations": {"service": "7A"}},
                ]
            }
        )
    )
    services = [
        _svc("OLD", "planned", "10:00", service="7"),
        _svc("X", "realtime", "10:04", service="7"),
    ]
    result = reconcile_arrivals(services, engine)

    assert len(result) == 1
    assert result[0].service == "7A"
    assert result[0].delay == 4


def test_extra_fields_survive(plain_engine: RuleEngine) -> None:
    result = reconcile_arrivals([_svc("Y", "planned", "09:00", destination="STAZIONE", bus_stop="MO1")], plain_engine)
    payload = result[0].to_payload()

    assert payload["destination"] == "STAZIONE"
    assert payload["bus_stop"] == "MO1"
