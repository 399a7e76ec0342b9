"""Which coffee a brew was made with, across both historical record shapes.

Newer brews carry a text snapshot of the coffee taken when they were logged.
Older ones only link to a coffee record and expose its columns through
lookup fields, which arrive as arrays.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from shared_types import BrewField

UNKNOWN_COFFEE = "Unknown Coffee"


@dataclass(frozen=True)
class Denormalized:
    name: str
    origin: Optional[str] = None
    roaster: Optional[str] = None
    varietal: Optional[str] = None
    process: Optional[str] = None


@dataclass(frozen=True)
class LinkedLookup:
    record_ids: tuple[str, ...] = ()
    names: tuple[str, ...] = ()
    varietals: tuple[str, ...] = ()


CoffeeAttribution = Union[Denormalized, LinkedLookup]


@dataclass(frozen=True)
class CoffeeDisplay:
    """Single projection the list view and cards work from."""

    name: str
    varietal: Optional[str] = None
    origin: Optional[str] = None
    roaster: Optional[str] = None
    process: Optional[str] = None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(t for t in (_text(v) for v in value) if t)
    text = _text(value)
    return (text,) if text else ()


def attribution_for(fields: dict[str, Any]) -> Optional[CoffeeAttribution]:
    name = _text(fields.get(BrewField.COFFEE_NAME))
    if name:
        return Denormalized(
            name=name,
            origin=_text(fields.get(BrewField.COFFEE_ORIGIN)),
            roaster=_text(fields.get(BrewField.COFFEE_ROASTER)),
            varietal=_text(fields.get(BrewField.COFFEE_VARIETAL)),
            process=_text(fields.get(BrewField.COFFEE_PROCESS)),
        )

    lookup = LinkedLookup(
        record_ids=_as_tuple(fields.get(BrewField.COFFEE)),
        names=_as_tuple(fields.get(BrewField.COFFEE_NAME_LOOKUP)),
        varietals=_as_tuple(fields.get(BrewField.COFFEE_VARIETAL_LOOKUP)),
    )
    if lookup.record_ids or lookup.names:
        return lookup
    return None


def resolve(attribution: Optional[CoffeeAttribution]) -> CoffeeDisplay:
    if isinstance(attribution, Denormalized):
        return CoffeeDisplay(
            name=attribution.name,
            varietal=attribution.varietal,
            origin=attribution.origin,
            roaster=attribution.roaster,
            process=attribution.process,
        )
    if isinstance(attribution, LinkedLookup) and attribution.names:
        return CoffeeDisplay(
            name=attribution.names[0],
            varietal=attribution.varietals[0] if attribution.varietals else None,
        )
    return CoffeeDisplay(name=UNKNOWN_COFFEE)


def coffee_display(fields: dict[str, Any]) -> CoffeeDisplay:
    return resolve(attribution_for(fields))
