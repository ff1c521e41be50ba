"""CSV and JSON result files."""

from __future__ import annotations

import base64
import json
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from fuzzwell.models import Config, Result, format_duration

HASH_KEYWORD = "FFUFHASH"

STATIC_HEADERS = (
    "url",
    "redirectlocation",
    "position",
    "status_code",
    "content_length",
    "content_words",
    "content_lines",
    "content_type",
    "duration",
    "resultfile",
    "Ffufhash",
)

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _timestamp() -> str:
    """Return the current local time in RFC 3339 form, with ``Z`` for UTC."""
    now = datetime.now().astimezone().replace(microsecond=0)
    if now.utcoffset() == timedelta(0):
        return now.strftime("%Y-%m-%dT%H:%M:%SZ")
    return now.isoformat()


def _text(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _csv_field(value: str) -> str:
    needs_quotes = value != "" and (
        value == "\\."
        or any(char in value for char in ',"\r\n')
        or value[:1].isspace()
    )
    if not needs_quotes:
        return value
    return '"' + value.replace('"', '""') + '"'


def _csv_line(fields: Iterable[str]) -> str:
    return ",".join(_csv_field(field) for field in fields) + "\n"


def to_csv_row(result: Result) -> list[str]:
    """Return the CSV fields of a result: inputs first, then the fixed columns."""
    inputs = []
    ffuf_hash = ""
    for key, value in result.input.items():
        if key == HASH_KEYWORD:
            ffuf_hash = _text(value)
        else:
            inputs.append(_text(value))
    return [
        *inputs,
        result.url,
        result.redirect_location,
        str(result.position),
        str(result.status_code),
        str(result.content_length),
        str(result.content_words),
        str(result.content_lines),
        result.content_type,
        format_duration(result.duration),
        result.result_file,
        ffuf_hash,
    ]


def write_csv(
    filename: str, config: Config, results: Sequence[Result], encode: bool = False
) -> None:
    """Write results as CSV; with ``encode`` the input values are base64 encoded."""
    header = [provider.keyword for provider in config.input_providers]
    header.extend(STATIC_HEADERS)
    with open(filename, "w", encoding="utf-8", errors="surrogateescape", newline="") as stream:
        stream.write(_csv_line(header))
        for result in results:
            if encode:
                result = replace(
                    result,
                    input={key: base64.b64encode(value) for key, value in result.input.items()},
                )
            stream.write(_csv_line(to_csv_row(result)))


def _dump_json(document: dict[str, Any]) -> str:
    text = json.dumps(document, ensure_ascii=False, separators=(",", ":"))
    for char, escaped in _JSON_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def _write_text(filename: str, text: str) -> None:
    with open(filename, "w", encoding="utf-8", newline="") as stream:
        stream.write(text)


def write_json(filename: str, config: Config, results: Sequence[Result]) -> None:
    """Write results as JSON with text inputs and the job configuration."""
    document = {
        "commandline": config.command_line,
        "time": _timestamp(),
        "results": [result.to_dict() for result in results],
        "config": config.to_dict(),
    }
    _write_text(filename, _dump_json(document))


def write_ejson(filename: str, config: Config, results: Sequence[Result]) -> None:
    """Write results as JSON with base64 encoded inputs and no configuration."""
    document = {
        "commandline": config.command_line,
        "time": _timestamp(),
        "results": [result.to_dict(base64_input=True) for result in results],
        "config": None,
    }
    _write_text(filename, _dump_json(document))