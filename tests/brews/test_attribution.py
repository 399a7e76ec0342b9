"""Tests for resolving which coffee a brew used."""

from brews.attribution import (
    UNKNOWN_COFFEE,
    CoffeeDisplay,
    Denormalized,
    LinkedLookup,
    attribution_for,
    coffee_display,
    resolve,
)


def test_snapshot_preferred_over_lookup():
    fields = {
        "Coffee Name": "Kiamabara",
        "Coffee Varietal": "SL28",
        "Coffee Origin": "Kenya",
        "Coffee": ["recC1"],
        "Name/Producer (from Coffee)": ["Renamed Later"],
    }
    attribution = attribution_for(fields)
    assert isinstance(attribution, Denormalized)
    assert coffee_display(fields) == CoffeeDisplay(name="Kiamabara", varietal="SL28", origin="Kenya")


def test_lookup_arrays_use_first_value():
    fields = {
        "Coffee": ["recC9"],
        "Name/Producer (from Coffee)": ["Finca Deborah", "Other"],
        "Varietal (from Coffee)": ["Gesha"],
    }
    assert attribution_for(fields) == LinkedLookup(
        record_ids=("recC9",), names=("Finca Deborah", "Other"), varietals=("Gesha",)
    )
    assert coffee_display(fields) == CoffeeDisplay(name="Finca Deborah", varietal="Gesha")


def test_blank_snapshot_falls_through_to_lookup():
    fields = {"Coffee Name": "   ", "Name/Producer (from Coffee)": ["Finca Deborah"]}
    assert isinstance(attribution_for(fields), LinkedLookup)


def test_link_without_names_is_unknown():
    assert coffee_display({"Coffee": ["recC9"]}).name == UNKNOWN_COFFEE


def test_no_coffee_at_all():
    assert attribution_for({"Brewer": "V60"}) is None
    assert resolve(None) == CoffeeDisplay(name=UNKNOWN_COFFEE)
