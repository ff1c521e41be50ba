"""Core data types shared by filters, inputs, runners and outputs."""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

_RANGE_RE = re.compile(r"(\d+)-(\d+)", re.ASCII)
_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000


@dataclass(frozen=True)
class ValueRange:
    """An inclusive range of integers."""

    min: int
    max: int

    def __contains__(self, value: int) -> bool:
        return self.min <= value <= self.max

    def __str__(self) -> str:
        if self.min == self.max:
            return str(self.min)
        return f"{self.min}-{self.max}"


def parse_value_range(value: str) -> ValueRange:
    """Parse ``"N"`` or ``"MIN-MAX"`` into a ValueRange; raise ValueError otherwise."""
    match = _RANGE_RE.fullmatch(value)
    if match:
        return ValueRange(int(match[1]), int(match[2]))
    if _INT_RE.fullmatch(value):
        number = int(value)
        return ValueRange(number, number)
    raise ValueError(f"invalid value range: {value!r}")


def _with_fraction(amount: int, unit: int) -> str:
    whole, rest = divmod(amount, unit)
    digits = len(str(unit)) - 1
    fraction = str(rest).zfill(digits).rstrip("0")
    return f"{whole}.{fraction}" if fraction else str(whole)


def format_duration(nanoseconds: int) -> str:
    """Render a duration given in nanoseconds, e.g. ``123ns``, ``1.5ms``, ``1h2m3s``."""
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    amount = abs(nanoseconds)
    if amount < _NS_PER_US:
        return f"{sign}{amount}ns"
    if amount < _NS_PER_MS:
        return f"{sign}{_with_fraction(amount, _NS_PER_US)}µs"
    if amount < _NS_PER_S:
        return f"{sign}{_with_fraction(amount, _NS_PER_MS)}ms"
    total_seconds, rest = divmod(amount, _NS_PER_S)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = sign
    if hours:
        text += f"{hours}h"
    if hours or minutes:
        text += f"{minutes}m"
    return text + _with_fraction(seconds * _NS_PER_S + rest, _NS_PER_S) + "s"


@dataclass
class InputProviderConfig:
    """Configuration of one input source bound to a keyword."""

    name: str = "wordlist"
    keyword: str = "FUZZ"
    value: str = ""
    encoders: str = ""


@dataclass
class Config:
    """Settings for a fuzzing job."""

    url: str = ""
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    data: str = ""
    command_line: str = ""
    input_providers: list[InputProviderConfig] = field(default_factory=list)
    input_mode: str = "clusterbomb"
    input_num: int = 100
    input_shell: str = ""
    command_keywords: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=list)
    dir_search_compat: bool = False
    ignore_wordlist_comments: bool = False
    output_file: str = ""
    output_format: str = "json"
    output_directory: str = ""
    output_skip_empty_file: bool = False
    follow_redirects: bool = False
    auto_calibration: bool = False
    proxy_url: str = ""
    replay_proxy_url: str = ""
    sni: str = ""
    client_cert: str = ""
    client_key: str = ""
    timeout: int = 10
    threads: int = 40
    rate: int = 0
    delay_min: float = 0.0
    delay_max: float = 0.0
    quiet: bool = False
    colors: bool = False
    json_output: bool = False
    verbose: bool = False
    raw: bool = False
    ignore_body: bool = False
    no_http2: bool = False
    matcher_manager: Any = None

    @property
    def has_delay(self) -> bool:
        return self.delay_min > 0 or self.delay_max > 0

    @property
    def delay_is_range(self) -> bool:
        return self.delay_max > self.delay_min

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable view of the configuration."""
        out: dict[str, Any] = {
            "url": self.url,
            "method": self.method,
            "headers": dict(self.headers),
            "postdata": self.data,
            "cmdline": self.command_line,
            "inputproviders": [
                {"name": p.name, "keyword": p.keyword, "value": p.value, "encoders": p.encoders}
                for p in self.input_providers
            ],
            "inputmode": self.input_mode,
            "inputnum": self.input_num,
            "inputshell": self.input_shell,
            "extensions": list(self.extensions),
            "dirsearch_compatibility": self.dir_search_compat,
            "ignore_wordlist_comments": self.ignore_wordlist_comments,
            "outputfile": self.output_file,
            "outputformat": self.output_format,
            "outputdirectory": self.output_directory,
            "output_skip_empty": self.output_skip_empty_file,
            "follow_redirects": self.follow_redirects,
            "autocalibration": self.auto_calibration,
            "proxyurl": self.proxy_url,
            "replayproxyurl": self.replay_proxy_url,
            "sni": self.sni,
            "timeout": self.timeout,
            "threads": self.threads,
            "rate": self.rate,
            "delay": {"min": self.delay_min, "max": self.delay_max},
            "quiet": self.quiet,
            "colors": self.colors,
            "json": self.json_output,
            "verbose": self.verbose,
            "raw": self.raw,
            "ignorebody": self.ignore_body,
            "http2": not self.no_http2,
        }
        manager = self.matcher_manager
        if manager is not None:
            out["matchers"] = {name: f.to_dict() for name, f in manager.matchers.items()}
            out["filters"] = {name: f.to_dict() for name, f in manager.filters.items()}
        return out


@dataclass
class Request:
    """An HTTP request with fuzzing inputs attached."""

    method: str = "GET"
    host: str = ""
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    data: bytes = b""
    input: dict[str, bytes] = field(default_factory=dict)
    position: int = 0
    raw: str = ""

    def copy(self) -> Request:
        """Return an independent copy."""
        return Request(
            method=self.method,
            host=self.host,
            url=self.url,
            headers=dict(self.headers),
            data=bytes(self.data),
            input=dict(self.input),
            position=self.position,
            raw=self.raw,
        )


@dataclass
class Response:
    """An HTTP response and the measurements taken from it.

    ``duration`` is the time to first byte in nanoseconds.
    """

    status_code: int = 0
    headers: dict[str, list[str]] = field(default_factory=dict)
    data: bytes = b""
    content_length: int = 0
    content_words: int = 0
    content_lines: int = 0
    content_type: str = ""
    cancelled: bool = False
    request: Request | None = None
    raw: str = ""
    result_file: str = ""
    scraper_data: dict[str, list[str]] = field(default_factory=dict)
    duration: int = 0

    def _header(self, name: str) -> list[str]:
        wanted = name.lower()
        for key, values in self.headers.items():
            if key.lower() == wanted:
                return values
        return []

    def redirect_location(self, absolute: bool = False) -> str:
        """Return the Location of a 3xx response, optionally resolved against the request URL."""
        location = ""
        if 300 <= self.status_code <= 399:
            values = self._header("Location")
            if values:
                location = values[0]
        if absolute:
            base = self.request.url if self.request is not None else ""
            try:
                return urljoin(base, location)
            except ValueError:
                return location
        return location


@dataclass
class ScraperResult:
    """Values a scraper rule extracted from a response."""

    name: str
    type: str
    action: list[str] = field(default_factory=list)
    results: list[str] = field(default_factory=list)


@dataclass
class Result:
    """A response that passed the matchers and filters."""

    input: dict[str, bytes] = field(default_factory=dict)
    position: int = 0
    status_code: int = 0
    content_length: int = 0
    content_words: int = 0
    content_lines: int = 0
    content_type: str = ""
    redirect_location: str = ""
    scraper_data: dict[str, list[str]] = field(default_factory=dict)
    duration: int = 0
    result_file: str = ""
    url: str = ""
    host: str = ""
    html_color: str = ""

    def to_dict(self, base64_input: bool = False) -> dict[str, Any]:
        """Return a JSON-serialisable view; inputs are text or base64 strings."""
        if base64_input:
            inputs = {k: base64.b64encode(v).decode("ascii") for k, v in self.input.items()}
        else:
            inputs = {k: v.decode("utf-8", errors="replace") for k, v in self.input.items()}
        return {
            "input": inputs,
            "position": self.position,
            "status": self.status_code,
            "length": self.content_length,
            "words": self.content_words,
            "lines": self.content_lines,
            "content-type": self.content_type,
            "redirectlocation": self.redirect_location,
            "scraper": {k: list(v) for k, v in self.scraper_data.items()},
            "duration": self.duration,
            "resultfile": self.result_file,
            "url": self.url,
            "host": self.host,
        }


@dataclass
class Progress:
    """A snapshot of job progress."""

    started_at: float = 0.0
    req_count: int = 0
    req_total: int = 0
    req_sec: int = 0
    queue_pos: int = 0
    queue_total: int = 0
    error_count: int = 0


def result_from_response(response: Response) -> Result:
    """Build a Result from a response and the request behind it."""
    request = response.request if response.request is not None else Request()
    return Result(
        input=dict(request.input),
        position=request.position,
        status_code=response.status_code,
        content_length=response.content_length,
        content_words=response.content_words,
        content_lines=response.content_lines,
        content_type=response.content_type,
        redirect_location=response.redirect_location(False),
        scraper_data={k: list(v) for k, v in response.scraper_data.items()},
        duration=response.duration,
        result_file=response.result_file,
        url=request.url,
        host=request.host,
    )