from __future__ import annotations

import pytest

from core.filters import (
    DEFAULT_SELECTION,
    FilterSelection,
    apply_filters,
    filter_options,
    normalize_filters,
)
from core.records import FacilityType, Status


def test_match_all_selection_returns_input(records):
    assert apply_filters(records, FilterSelection()) == records


def test_default_selection_keeps_single_region(records):
    assert apply_filters(records, DEFAULT_SELECTION) == records


def test_other_region_yields_empty_view(records):
    assert apply_filters(records, FilterSelection(region="Oran")) == []


def test_filters_are_conjunctive(records):
    selection = FilterSelection(facility_type=FacilityType.CEM, technician="Samir")
    assert [r.equipment for r in apply_filters(records, selection)] == ["PC-04"]


def test_status_filter(records):
    view = apply_filters(records, FilterSelection(status=Status.REPAIRED))
    assert [r.equipment for r in view] == ["PC-02", "PC-04"]


def test_apply_filters_is_idempotent(records):
    selection = FilterSelection(technician="Karim")
    once = apply_filters(records, selection)
    assert apply_filters(once, selection) == once


def test_apply_filters_does_not_touch_source(records):
    before = list(records)
    view = apply_filters(records, FilterSelection(status=Status.RECEIVED))
    assert records == before
    assert view is not records


def test_empty_input():
    assert apply_filters([], DEFAULT_SELECTION) == []


def test_normalize_filters_match_all_tokens():
    assert normalize_filters({"region": "all", "facility_type": "", "technician": None}) == FilterSelection()
    assert normalize_filters(None) == FilterSelection()


def test_normalize_filters_accepts_values_and_names():
    selection = normalize_filters({"facility_type": "Lycée", "status": "REPAIRED", "technician": "Karim"})
    assert selection.facility_type is FacilityType.LYCEE
    assert selection.status is Status.REPAIRED
    assert selection.technician == "Karim"
    assert normalize_filters({"status": "nr"}).status is Status.UNREPAIRED


def test_normalize_filters_rejects_unknown_values():
    with pytest.raises(ValueError):
        normalize_filters({"status": "perdu"})
    with pytest.raises(ValueError):
        normalize_filters({"facility_type": "Université"})


def test_as_dict_round_trips():
    selection = FilterSelection(region="El Bayadh", facility_type=FacilityType.EP, status=Status.RECEIVED)
    assert normalize_filters(selection.as_dict()) == selection


def test_filter_options(records):
    options = filter_options(records)
    assert options["region"] == ["El Bayadh"]
    assert options["technician"] == ["Karim", "Samir"]
    assert options["facility_type"] == ["EP", "CEM", "Lycée", "Direction", "Autre"]
    assert options["status"] == ["rec", "re", "nr"]
