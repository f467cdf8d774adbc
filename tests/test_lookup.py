"""
Tests for active-record filtering and name lookups.
"""

import asyncio

import pytest

from conftest import FakeCachetClient, make_component, make_incident
from statushook.errors import AmbiguousMatchError, NotFoundError
from statushook.lookup import (
    expect_one,
    filter_active,
    find_all_by_name,
    find_one_by_name,
    to_records,
)
from statushook.models import Component, Incident, IncidentStatus, ResourceType

INCIDENTS = ResourceType.INCIDENTS
COMPONENTS = ResourceType.COMPONENTS


def _incidents(*raw):
    return to_records(INCIDENTS, raw)


def _components(*raw):
    return to_records(COMPONENTS, raw)


class TestFilterActive:
    def test_drops_fixed_incidents(self):
        records = _incidents(
            make_incident(1, "a"),
            make_incident(2, "b", status=IncidentStatus.FIXED),
            make_incident(3, "c", status=IncidentStatus.WATCHING),
        )
        assert [r.id for r in filter_active(INCIDENTS, records)] == [1, 3]

    def test_drops_hidden_incidents(self):
        records = _incidents(
            make_incident(1, "a", visible=0),
            make_incident(2, "b", visible="1"),
            make_incident(3, "c", visible=False),
            make_incident(4, "d", visible=True),
        )
        assert [r.id for r in filter_active(INCIDENTS, records)] == [2, 4]

    def test_keeps_every_other_incident_status_in_order(self):
        statuses = [
            IncidentStatus.WATCHING,
            IncidentStatus.SCHEDULED,
            IncidentStatus.IDENTIFIED,
            IncidentStatus.INVESTIGATING,
        ]
        records = _incidents(*(make_incident(i, "x", status=s) for i, s in enumerate(statuses, 1)))
        assert [r.id for r in filter_active(INCIDENTS, records)] == [1, 2, 3, 4]

    def test_drops_disabled_components(self):
        records = _components(
            make_component(1, "a", enabled=True),
            make_component(2, "b", enabled=False),
            make_component(3, "c", enabled="true"),
            make_component(4, "d", enabled="false"),
        )
        assert [r.id for r in filter_active(COMPONENTS, records)] == [1, 3]

    def test_metrics_are_never_active(self):
        records = to_records(ResourceType.METRICS, [{"id": 1}, {"id": 2}])
        assert filter_active(ResourceType.METRICS, records) == []

    def test_empty_input(self):
        assert filter_active(INCIDENTS, []) == []
        assert filter_active(COMPONENTS, []) == []

    def test_does_not_modify_input(self):
        records = _incidents(make_incident(1, "a", status=IncidentStatus.FIXED))
        filter_active(INCIDENTS, records)
        assert len(records) == 1


class TestToRecords:
    def test_builds_typed_records(self):
        assert isinstance(_incidents(make_incident(1, "a"))[0], Incident)
        assert isinstance(_components(make_component(1, "a"))[0], Component)


class TestExpectOne:
    def test_single_record(self):
        assert expect_one(COMPONENTS, "API", ["only"]) == "only"

    def test_none_raises_not_found(self):
        with pytest.raises(NotFoundError, match="name=API"):
            expect_one(COMPONENTS, "API", [])

    def test_several_raise_ambiguous(self):
        with pytest.raises(AmbiguousMatchError) as excinfo:
            expect_one(COMPONENTS, "API", ["a", "b", "c"])
        assert excinfo.value.count == 3


class TestFindByName:
    def _client(self):
        return FakeCachetClient(
            components=[
                make_component(1, "API"),
                make_component(2, "API"),
                make_component(3, "Web"),
                make_component(4, "Docs", enabled=False),
            ],
            incidents=[
                make_incident(10, "[monitor] ping"),
                make_incident(11, "[monitor] ping", status=IncidentStatus.FIXED),
            ],
        )

    def test_find_all_filters_inactive(self):
        found = asyncio.run(find_all_by_name(self._client(), INCIDENTS, "[monitor] ping"))
        assert [r.id for r in found] == [10]

    def test_find_all_never_fails_on_count(self):
        client = self._client()
        assert asyncio.run(find_all_by_name(client, COMPONENTS, "missing")) == []
        assert len(asyncio.run(find_all_by_name(client, COMPONENTS, "API"))) == 2

    def test_find_one(self):
        found = asyncio.run(find_one_by_name(self._client(), COMPONENTS, "Web"))
        assert found.id == 3

    def test_find_one_disabled_is_not_found(self):
        with pytest.raises(NotFoundError):
            asyncio.run(find_one_by_name(self._client(), COMPONENTS, "Docs"))

    def test_find_one_ambiguous(self):
        with pytest.raises(AmbiguousMatchError):
            asyncio.run(find_one_by_name(self._client(), COMPONENTS, "API"))

    def test_find_one_is_repeatable(self):
        client = self._client()
        first = asyncio.run(find_one_by_name(client, COMPONENTS, "Web"))
        second = asyncio.run(find_one_by_name(client, COMPONENTS, "Web"))
        assert first == second
