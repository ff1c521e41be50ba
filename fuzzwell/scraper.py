"""Scraper rules that extract values from responses with regular expressions or CSS queries."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

from fuzzwell.models import Response, ScraperResult


def header_string(headers: dict[str, list[str]]) -> str:
    """Render headers as ``Name: value`` lines, one per value."""
    return "".join(f"{name}: {value}\n" for name, values in headers.items() for value in values)


def parse_active_groups(active: str) -> list[str]:
    """Split a comma separated list of group names into normalised names."""
    return [name.strip().lower() for name in active.split(",")]


def is_active(name: str, groups: list[str]) -> bool:
    """Tell whether a group name is among the active groups."""
    return name.strip().lower() in groups


def _expect(value: Any, kind: type, key: str) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"field {key!r} has the wrong type")
    return value


@dataclass
class ScraperRule:
    """A single extraction rule."""

    name: str = ""
    rule: str = ""
    target: str = ""
    type: str = ""
    only_matched: bool = False
    action: list[str] = field(default_factory=list)
    _compiled: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> ScraperRule:
        """Build a rule from its JSON object; raise ValueError on a malformed object."""
        fields = {str(k).lower(): v for k, v in _expect(data, dict, "rule").items()}
        actions = _expect(fields.get("action") or [], list, "action")
        return cls(
            name=_expect(fields.get("name", ""), str, "name"),
            rule=_expect(fields.get("rule", ""), str, "rule"),
            target=_expect(fields.get("target", ""), str, "target"),
            type=_expect(fields.get("type", ""), str, "type"),
            only_matched=_expect(fields.get("onlymatched", False), bool, "onlymatched"),
            action=[_expect(a, str, "action") for a in actions],
        )

    def compile(self) -> None:
        """Compile a regexp rule; raise re.error when the pattern is invalid."""
        if self.type == "regexp":
            self._compiled = re.compile(self.rule)

    def check(self, data: str) -> list[str]:
        """Return the values the rule extracts from ``data``."""
        if self.type == "regexp":
            return self._check_regexp(data)
        if self.type == "query":
            return self._check_query(data)
        return []

    def _check_regexp(self, data: str) -> list[str]:
        if self._compiled is None:
            return []
        return [
            text
            for match in self._compiled.finditer(data)
            for text in (match.group(0), *match.groups(""))
        ]

    def _check_query(self, data: str) -> list[str]:
        try:
            document = BeautifulSoup(data, "html.parser")
            return [element.get_text() for element in document.select(self.rule)]
        except Exception:  # an unusable selector matches nothing
            return []


@dataclass
class ScraperGroup:
    """A named collection of rules as stored in one JSON file."""

    rules: list[ScraperRule] = field(default_factory=list)
    name: str = ""
    active: bool = False


def read_group_from_file(filename: str | os.PathLike[str]) -> ScraperGroup:
    """Read a rule group; raise OSError when unreadable and ValueError when malformed."""
    with open(filename, encoding="utf-8") as stream:
        document = json.load(stream)
    fields = {str(k).lower(): v for k, v in _expect(document, dict, "group").items()}
    rules = _expect(fields.get("rules") or [], list, "rules")
    return ScraperGroup(
        rules=[ScraperRule.from_dict(rule) for rule in rules],
        name=_expect(fields.get("groupname", ""), str, "groupname"),
        active=_expect(fields.get("active", False), bool, "active"),
    )


class Scraper:
    """Runs a set of rules against responses."""

    def __init__(self, rules: list[ScraperRule] | None = None) -> None:
        self.rules: list[ScraperRule] = list(rules) if rules else []

    def append_from_file(self, path: str | os.PathLike[str]) -> None:
        """Add the valid rules of a group file.

        Invalid rules are skipped; ValueError is raised afterwards if the last rule was invalid.
        """
        group = read_group_from_file(path)
        last_error: re.error | None = None
        for rule in group.rules:
            try:
                rule.compile()
            except re.error as exc:
                last_error = exc
                continue
            last_error = None
            self.rules.append(rule)
        if last_error is not None:
            raise ValueError(f"{path} : {last_error}") from last_error

    def execute(self, response: Response, matched: bool) -> list[ScraperResult]:
        """Apply every rule to the response and return the non-empty results."""
        results = []
        body = response.data.decode("utf-8", errors="replace")
        for rule in self.rules:
            if not matched and rule.only_matched:
                continue
            if rule.target == "body":
                source = body
            elif rule.target == "headers":
                source = header_string(response.headers)
            else:
                source = header_string(response.headers) + body
            values = rule.check(source)
            if values:
                results.append(
                    ScraperResult(
                        name=rule.name, type=rule.type, action=list(rule.action), results=values
                    )
                )
        return results


def scraper_from_dir(
    dirname: str | os.PathLike[str], active: str
) -> tuple[Scraper, list[Exception]]:
    """Load the active rule groups of a directory.

    Returns the scraper with every usable rule and the errors met on the way.
    """
    scraper = Scraper()
    errors: list[Exception] = []
    groups = parse_active_groups(active)
    try:
        with os.scandir(dirname) as listing:
            entries = sorted(listing, key=lambda entry: entry.name)
    except OSError as exc:
        return scraper, [exc]
    for entry in entries:
        if not (entry.is_file(follow_symlinks=False) and entry.name.endswith(".json")):
            continue
        path = os.path.join(dirname, entry.name)
        try:
            group = read_group_from_file(path)
        except (OSError, ValueError) as exc:
            errors.append(ValueError(f"{path} : {exc}"))
            continue
        if (group.active and is_active("all", groups)) or is_active(group.name, groups):
            for rule in group.rules:
                try:
                    rule.compile()
                except re.error as exc:
                    errors.append(ValueError(f"{path} : {exc}"))
                    continue
                scraper.rules.append(rule)
    return scraper, errors