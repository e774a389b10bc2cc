"""Pure read-side projections over the place list."""

from __future__ import annotations

import dataclasses
from collections import Counter
from collections.abc import Iterable, Sequence

from sfmap._constants import DEFAULT_CITY
from sfmap.models.place import Place


@dataclasses.dataclass(frozen=True)
class PlaceFilter:
    """City → category → free-text selection. Empty values match everything."""

    city: str = ""
    category: str = ""
    text: str = ""

    def normalized(self) -> PlaceFilter:
        return PlaceFilter(
            city=self.city.strip(),
            category=self.category.strip(),
            text=self.text.strip().lower(),
        )


def matches(place: Place, place_filter: PlaceFilter) -> bool:
    f = place_filter.normalized()
    if f.city and place.city != f.city:
        return False
    if f.category and place.category != f.category:
        return False
    if not f.text:
        return True
    haystack = f"{place.name} {place.city} {place.address} {place.category}".lower()
    return f.text in haystack


def apply_filter(items: Iterable[Place], place_filter: PlaceFilter) -> list[Place]:
    """Places matching *place_filter*, in list order."""
    return [place for place in items if matches(place, place_filter)]


def _facets(values: Iterable[str]) -> list[tuple[str, int]]:
    counts = Counter(v.strip() for v in values if v and v.strip())
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def city_facets(items: Iterable[Place]) -> list[tuple[str, int]]:
    """``(city, count)`` pairs, most frequent first, ties by name."""
    return _facets(place.city for place in items)


def category_facets(items: Sequence[Place], city: str = "") -> list[tuple[str, int]]:
    """Category counts, restricted to *city* when given."""
    city = city.strip()
    scoped = [p for p in items if p.city.strip() == city] if city else list(items)
    return _facets(place.category for place in scoped)


def default_city(items: Iterable[Place], preferred: str = DEFAULT_CITY) -> str:
    """*preferred* if any place is in it, else ``""`` (all cities)."""
    return preferred if any(place.city.strip() == preferred for place in items) else ""
