"""Client-side narrowing of property result sets."""

from collections.abc import Iterable

from ask4rent.domain.listings import Property
from ask4rent.domain.search import PropertyFilter


def filter_properties(
    properties: Iterable[Property], criteria: PropertyFilter
) -> tuple[Property, ...]:
    """Return the properties matching every bound that is set.

    A listing with an unknown value is excluded once a bound on that value is set.
    """
    return tuple(item for item in properties if matches(item, criteria))


def matches(item: Property, criteria: PropertyFilter) -> bool:
    return (
        _within(item.rent_per_week, criteria.min_rent, criteria.max_rent)
        and _within(item.bedrooms, criteria.min_bedrooms, criteria.max_bedrooms)
        and _within(item.bathrooms, criteria.min_bathrooms, criteria.max_bathrooms)
    )


def is_empty(criteria: PropertyFilter) -> bool:
    return criteria == PropertyFilter()


def _within(value: float | None, low: float | None, high: float | None) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    if low is not None and value < low:
        return False
    return high is None or value <= high
