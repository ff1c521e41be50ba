"""Filters and matchers that decide whether a response is interesting."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from fuzzwell.models import Response, ValueRange, parse_value_range

ALL_STATUSES = 0

_TIME_VALUE_RE = re.compile(r"[+-]?\d+", re.ASCII)


class FilterError(ValueError):
    """Raised when a filter or matcher value cannot be parsed."""


class RangeFilter(ABC):
    """Matches when a measured quantity of a response falls in one of several ranges."""

    _label = "Filter or matcher"
    _verbose_name = "Response value"

    def __init__(self, value: str) -> None:
        self.value: list[ValueRange] = [self._parse_item(item) for item in value.split(",")]

    def _parse_item(self, item: str) -> ValueRange:
        try:
            return parse_value_range(item)
        except ValueError:
            raise FilterError(f"{self._label}: invalid value: {item}") from None

    @abstractmethod
    def _measure(self, response: Response) -> int:
        """Return the quantity of the response that the ranges are compared with."""

    def _format_range(self, value_range: ValueRange) -> str:
        return str(value_range)

    def filter(self, response: Response) -> bool:
        measured = self._measure(response)
        return any(measured in r for r in self.value)

    def __str__(self) -> str:
        return ",".join(self._format_range(r) for r in self.value)

    def describe(self) -> str:
        return f"{self._verbose_name}: {self}"

    def to_dict(self) -> dict[str, str]:
        return {"value": str(self)}


class SizeFilter(RangeFilter):
    """Matches on response size in bytes."""

    _label = "Size filter or matcher (-fs / -ms)"
    _verbose_name = "Response size"

    def _measure(self, response: Response) -> int:
        return response.content_length


class WordFilter(RangeFilter):
    """Matches on the number of space-separated words in the body."""

    _label = "Word filter or matcher (-fw / -mw)"
    _verbose_name = "Response words"

    def _measure(self, response: Response) -> int:
        return response.data.count(b" ") + 1


class LineFilter(RangeFilter):
    """Matches on the number of lines in the body."""

    _label = "Line filter or matcher (-fl / -ml)"
    _verbose_name = "Response lines"

    def _measure(self, response: Response) -> int:
        return response.data.count(b"\n") + 1


class StatusFilter(RangeFilter):
    """Matches on status code; the value ``all`` matches every status."""

    _label = "Status filter or matcher (-fc / -mc)"
    _verbose_name = "Response status"

    def __init__(self, value: str) -> None:
        self.value = [
            ValueRange(ALL_STATUSES, ALL_STATUSES) if item == "all" else self._parse_status(item)
            for item in value.split(",")
        ]

    def _parse_status(self, item: str) -> ValueRange:
        try:
            return parse_value_range(item)
        except ValueError:
            raise FilterError(f"{self._label}: invalid value {item}") from None

    @staticmethod
    def _is_all(value_range: ValueRange) -> bool:
        return value_range.min == ALL_STATUSES and value_range.max == ALL_STATUSES

    def _measure(self, response: Response) -> int:
        return response.status_code

    def _format_range(self, value_range: ValueRange) -> str:
        return "all" if self._is_all(value_range) else str(value_range)

    def filter(self, response: Response) -> bool:
        for r in self.value:
            if self._is_all(r) or response.status_code in r:
                return True
        return False


class RegexpFilter:
    """Matches a regular expression against the headers and body.

    Input keywords inside the pattern are replaced with the escaped input values.
    """

    def __init__(self, value: str) -> None:
        try:
            self.pattern = re.compile(value)
        except re.error:
            raise FilterError(
                f"Regexp filter or matcher (-fr / -mr): invalid value: {value}"
            ) from None
        self.raw = value

    def filter(self, response: Response) -> bool:
        header_text = "".join(
            f"{name}: {item}\r\n" for name, values in response.headers.items() for item in values
        )
        subject = header_text + response.data.decode("utf-8", errors="replace")
        pattern = self.raw
        if response.request is not None:
            for keyword, item in response.request.input.items():
                escaped = re.escape(item.decode("utf-8", errors="replace"))
                pattern = pattern.replace(keyword, escaped)
        try:
            return re.search(pattern, subject) is not None
        except re.error:
            return False

    def __str__(self) -> str:
        return self.raw

    def describe(self) -> str:
        return f"Regexp: {self.raw}"

    def to_dict(self) -> dict[str, str]:
        return {"value": self.raw}


class TimeFilter:
    """Matches on time to first byte: ``>N`` or ``<N`` milliseconds."""

    def __init__(self, value: str) -> None:
        error = FilterError(f"Time filter or matcher (-ft / -mt): invalid value: {value}")
        self.greater_than = value.startswith(">")
        self.less_than = value.startswith("<")
        if self.greater_than == self.less_than or not _TIME_VALUE_RE.fullmatch(value[1:]):
            raise error
        self.milliseconds = int(value[1:])
        self.raw = value

    def filter(self, response: Response) -> bool:
        elapsed = abs(response.duration) // 1_000_000
        if response.duration < 0:
            elapsed = -elapsed
        if self.greater_than:
            return elapsed > self.milliseconds
        return elapsed < self.milliseconds

    def __str__(self) -> str:
        return self.raw

    def describe(self) -> str:
        return f"Response time: {self.raw}"

    def to_dict(self) -> dict[str, str]:
        return {"value": self.raw}