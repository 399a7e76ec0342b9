"""In-memory filter and pagination over the fetched brew history."""

import math
from dataclasses import dataclass, fields as dataclass_fields
from typing import Iterable, Optional, Sequence

from brews.attribution import UNKNOWN_COFFEE, attribution_for, resolve
from records.models import Record
from shared_types import BrewField

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class ActiveFilters:
    """Exact-match constraints; None matches anything."""

    coffee: Optional[str] = None
    varietal: Optional[str] = None
    brewer: Optional[str] = None
    creator: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in dataclass_fields(self))


@dataclass(frozen=True)
class FilterFacets:
    """Distinct, sorted, non-blank values per filter dimension."""

    coffees: tuple[str, ...] = ()
    varietals: tuple[str, ...] = ()
    brewers: tuple[str, ...] = ()
    creators: tuple[str, ...] = ()


@dataclass(frozen=True)
class Page:
    items: list[Record]
    page: int
    total_pages: int
    total_items: int


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def brew_dimensions(record: Record) -> dict[str, Optional[str]]:
    """Filterable values of one brew, keyed like ActiveFilters."""
    attribution = attribution_for(record.fields)
    display = resolve(attribution) if attribution else None
    coffee = display.name if display and display.name != UNKNOWN_COFFEE else None
    return {
        "coffee": _clean(coffee),
        "varietal": _clean(display.varietal) if display else None,
        "brewer": _clean(record.get(BrewField.BREWER)),
        "creator": _clean(record.get(BrewField.CREATED_BY)),
    }


def build_facets(records: Iterable[Record]) -> FilterFacets:
    values: dict[str, set[str]] = {"coffee": set(), "varietal": set(), "brewer": set(), "creator": set()}
    for record in records:
        for dimension, value in brew_dimensions(record).items():
            if value:
                values[dimension].add(value)
    return FilterFacets(
        coffees=tuple(sorted(values["coffee"])),
        varietals=tuple(sorted(values["varietal"])),
        brewers=tuple(sorted(values["brewer"])),
        creators=tuple(sorted(values["creator"])),
    )


def apply_filters(records: Sequence[Record], filters: ActiveFilters) -> list[Record]:
    """Records matching every set filter, in their original order."""
    if filters.is_empty():
        return list(records)
    wanted = {
        f.name: getattr(filters, f.name)
        for f in dataclass_fields(filters)
        if getattr(filters, f.name) is not None
    }
    matched = []
    for record in records:
        dims = brew_dimensions(record)
        if all(dims[name] == value for name, value in wanted.items()):
            matched.append(record)
    return matched


def paginate(items: Sequence[Record], page_size: int = DEFAULT_PAGE_SIZE, page: int = 1) -> Page:
    """Fixed-size window; ``page`` is clamped into range."""
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    total_items = len(items)
    total_pages = math.ceil(total_items / page_size)
    if total_pages == 0:
        return Page(items=[], page=1, total_pages=0, total_items=0)

    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        total_pages=total_pages,
        total_items=total_items,
    )


class BrewListView:
    """Holds the full brew set client-side and serves filtered pages from it."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        self.page_size = page_size
        self.records: list[Record] = []
        self.facets = FilterFacets()
        self.filters = ActiveFilters()
        self.page = 1

    def set_data(self, records: Iterable[Record]) -> None:
        self.records = list(records)
        self.facets = build_facets(self.records)
        total_pages = paginate(self.filtered(), self.page_size, 1).total_pages
        if self.page > total_pages:
            self.page = 1

    def apply_filters(self, filters: ActiveFilters) -> list[Record]:
        return apply_filters(self.records, filters)

    def filtered(self) -> list[Record]:
        return self.apply_filters(self.filters)

    def paginate(self, filtered: Sequence[Record], page: Optional[int] = None) -> Page:
        return paginate(filtered, self.page_size, self.page if page is None else page)

    def set_filters(self, filters: ActiveFilters) -> Page:
        self.filters = filters
        self.page = 1
        return self.current()

    def go_to(self, page: int) -> Page:
        self.page = page
        return self.current()

    def current(self) -> Page:
        result = self.paginate(self.filtered())
        self.page = result.page
        return result
