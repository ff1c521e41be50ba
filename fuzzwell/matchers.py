"""Registry of active matchers, filters and per-domain filters."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from fuzzwell.filters import (
    FilterError,
    LineFilter,
    RegexpFilter,
    SizeFilter,
    StatusFilter,
    TimeFilter,
    WordFilter,
)

_FILTER_TYPES: dict[str, type] = {
    "status": StatusFilter,
    "size": SizeFilter,
    "word": WordFilter,
    "line": LineFilter,
    "regexp": RegexpFilter,
    "time": TimeFilter,
}


def new_filter_by_name(name: str, value: str) -> Any:
    """Create the filter registered under ``name``; raise FilterError on failure."""
    try:
        filter_type = _FILTER_TYPES[name]
    except KeyError:
        raise FilterError(f"Could not create filter with name {name}") from None
    return filter_type(value)


@dataclass
class PerDomainFilter:
    """Filters and calibration state for a single host."""

    filters: dict[str, Any] = field(default_factory=dict)
    is_calibrated: bool = False


class MatcherManager:
    """Holds matchers and filters, globally and per domain."""

    def __init__(self) -> None:
        self.is_calibrated = False
        self.matchers: dict[str, Any] = {}
        self.filters: dict[str, Any] = {}
        self.per_domain_filters: dict[str, PerDomainFilter] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _merge(table: dict[str, Any], name: str, option: str, replace: bool = False) -> None:
        created = new_filter_by_name(name, option)
        existing = table.get(name)
        if existing is None or replace:
            table[name] = created
            return
        try:
            table[name] = new_filter_by_name(name, f"{existing},{option}")
        except FilterError:
            pass

    def add_filter(self, name: str, option: str, replace: bool = False) -> None:
        """Add a filter, appending to an existing one of that name unless replacing."""
        with self._lock:
            self._merge(self.filters, name, option, replace)

    def add_per_domain_filter(self, domain: str, name: str, option: str) -> None:
        """Add a filter that applies to one domain only."""
        with self._lock:
            per_domain = self.per_domain_filters.get(domain)
            if per_domain is None:
                per_domain = PerDomainFilter(filters=dict(self.filters))
            self.per_domain_filters[domain] = per_domain
            self._merge(per_domain.filters, name, option)

    def remove_filter(self, name: str) -> None:
        with self._lock:
            self.filters.pop(name, None)

    def add_matcher(self, name: str, option: str) -> None:
        """Add a matcher, appending to an existing one of that name."""
        with self._lock:
            self._merge(self.matchers, name, option)

    def filters_for_domain(self, domain: str) -> dict[str, Any]:
        per_domain = self.per_domain_filters.get(domain)
        return self.filters if per_domain is None else per_domain.filters

    def calibrated_for_domain(self, domain: str) -> bool:
        per_domain = self.per_domain_filters.get(domain)
        return per_domain.is_calibrated if per_domain is not None else False

    def set_calibrated_for_host(self, host: str, value: bool) -> None:
        """Set calibration state for a host; an unknown host is created as calibrated."""
        per_domain = self.per_domain_filters.get(host)
        if per_domain is not None:
            per_domain.is_calibrated = value
        else:
            self.per_domain_filters[host] = PerDomainFilter(
                filters=dict(self.filters), is_calibrated=True
            )