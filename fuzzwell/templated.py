"""HTML and Markdown result reports."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from jinja2 import Environment

from fuzzwell.models import Config, Result, format_duration

HASH_KEYWORD = "FFUFHASH"

_HTML_ESCAPES = str.maketrans(
    {"&": "&amp;", "'": "&#39;", "<": "&lt;", ">": "&gt;", '"': "&#34;"}
)

HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
  <head>
    <meta http-equiv="Content-Type" content="text/html; charset=UTF-8" />
    <meta
      name="viewport"
      content="width=device-width, initial-scale=1, maximum-scale=1.0"
    />
    <title>FFUF Report - </title>
  </head>

  <body>
    <nav>
      <div class="nav-wrapper">
        <a href="#" class="brand-logo">FFUF</a>
      </div>
    </nav>

    <main class="section no-pad-bot" id="index-banner">
      <div class="container">
        <br /><br />
        <h1 class="header center ">FFUF Report</h1>
        <div class="row center">

		<pre>{{ command_line }}</pre>
		<pre>{{ time }}</pre>

   <table id="ffufreport">
        <thead>
        <div style="display:none">
|result_raw|StatusCode{% for keyword in keys %}|{{ keyword }}{% endfor %}|Url|RedirectLocation|Position|ContentLength|ContentWords|ContentLines|ContentType|Duration|Resultfile|ScraperData|FfufHash|
        </div>
          <tr>
              <th>Status</th>
{% for keyword in keys %}              <th>{{ keyword }}</th>{% endfor %}
			  <th>URL</th>
			  <th>Redirect location</th>
              <th>Position</th>
              <th>Length</th>
              <th>Words</th>
			  <th>Lines</th>
			  <th>Type</th>
              <th>Duration</th>
			  <th>Resultfile</th>
              <th>Scraper data</th>
              <th>Ffuf Hash</th>
          </tr>
        </thead>

        <tbody>
			{% for result in results %}
                <div style="display:none">
|result_raw|{{ result.status_code }}{% for value in result.inputs %}|{{ value }}{% endfor %}|{{ result.url }}|{{ result.redirect_location }}|{{ result.position }}|{{ result.content_length }}|{{ result.content_words }}|{{ result.content_lines }}|{{ result.content_type }}|{{ result.duration }}|{{ result.result_file }}|{{ result.scraper_data }}|{{ result.ffuf_hash }}|
                </div>
                <tr class="result-{{ result.status_code }}" style="background-color: {{ result.html_color }};">
                    <td><font color="black" class="status-code">{{ result.status_code }}</font></td>
                    {% for value in result.inputs %}
                        <td>{{ value }}</td>
                    {% endfor %}
                    <td><a href="{{ result.url }}">{{ result.url }}</a></td>
                    <td><a href="{{ result.redirect_location }}">{{ result.redirect_location }}</a></td>
                    <td>{{ result.position }}</td>
                    <td>{{ result.content_length }}</td>
                    <td>{{ result.content_words }}</td>
					<td>{{ result.content_lines }}</td>
					<td>{{ result.content_type }}</td>
					<td>{{ result.duration }}</td>
                    <td>{{ result.result_file }}</td>
					<td>{{ result.scraper_data }}</td>
					<td>{{ result.ffuf_hash }}</td>
                </tr>
            {% endfor %}
        </tbody>
      </table>

        </div>
        <br /><br />
      </div>
    </main>

    <style>
      body {
        display: flex;
        min-height: 100vh;
        flex-direction: column;
        font-family: sans-serif;
      }

      main {
        flex: 1 0 auto;
      }

      table {
        border-collapse: collapse;
      }

      td, th {
        padding: 4px 8px;
        text-align: left;
      }
    </style>
  </body>
</html>

\t"""

MARKDOWN_TEMPLATE = (
    "# FFUF Report\n"
    "\n"
    "  Command line : `{{ command_line }}`\n"
    "  Time: {{ time }}\n"
    "\n"
    "  {% for keyword in keys %}| {{ keyword }} {% endfor %}"
    "| URL | Redirectlocation | Position | Status Code | Content Length | Content Words"
    " | Content Lines | Content Type | Duration | ResultFile | ScraperData | Ffufhash\n"
    "  {% for keyword in keys %}| :- {% endfor %}"
    "| :-- | :--------------- | :---- | :------- | :---------- | :------------- | :------------"
    " | :--------- | :----------- | :------------ | :-------- |\n"
    "  {% for result in results %}{% for value in result.inputs %}| {{ value }} {% endfor %}"
    "| {{ result.url }} | {{ result.redirect_location }} | {{ result.position }}"
    " | {{ result.status_code }} | {{ result.content_length }} | {{ result.content_words }}"
    " | {{ result.content_lines }} | {{ result.content_type }} | {{ result.duration }}"
    " | {{ result.result_file }} | {{ result.scraper_data }} | {{ result.ffuf_hash }}\n"
    "  {% endfor %}"
)

_ENVIRONMENT = Environment(autoescape=True, keep_trailing_newline=True)


def _timestamp() -> str:
    now = datetime.now().astimezone().replace(microsecond=0)
    if now.utcoffset() == timedelta(0):
        return now.strftime("%Y-%m-%dT%H:%M:%SZ")
    return now.isoformat()


def _text(data: bytes) -> str:
    return data.decode("utf-8", "replace")


def _color_for(status: int) -> str:
    if 200 <= status <= 299:
        return "#adea9e"
    if 300 <= status <= 399:
        return "#bbbbe6"
    if 400 <= status <= 499:
        return "#d2cb7e"
    if 500 <= status <= 599:
        return "#de8dc1"
    return "black"


def colorize_results(results: Sequence[Result]) -> list[Result]:
    """Return copies of the results with a row colour chosen by status class."""
    return [replace(result, html_color=_color_for(result.status_code)) for result in results]


def _scraper_markup(scraper_data: Mapping[str, list[str]], escape: bool) -> str:
    def clean(text: str) -> str:
        return text.translate(_HTML_ESCAPES) if escape else text

    return "".join(
        f"<p><b>{clean(name)}:</b><br />" + "<br />".join(clean(v) for v in values) + "</p>"
        for name, values in scraper_data.items()
        if values
    )


def _row(result: Result, inputs: Mapping[str, str], ffuf_hash: str, escape: bool) -> dict[str, Any]:
    return {
        "inputs": [inputs[key] for key in sorted(inputs)],
        "position": result.position,
        "status_code": result.status_code,
        "content_length": result.content_length,
        "content_words": result.content_words,
        "content_lines": result.content_lines,
        "content_type": result.content_type,
        "redirect_location": result.redirect_location,
        "scraper_data": _scraper_markup(result.scraper_data, escape),
        "duration": format_duration(result.duration),
        "result_file": result.result_file,
        "url": result.url,
        "host": result.host,
        "html_color": result.html_color,
        "ffuf_hash": ffuf_hash,
    }


def _render(filename: str, template: str, config: Config, rows: list[dict[str, Any]]) -> None:
    text = _ENVIRONMENT.from_string(template).render(
        command_line=config.command_line,
        time=_timestamp(),
        keys=[provider.keyword for provider in config.input_providers],
        results=rows,
    )
    with open(filename, "w", encoding="utf-8", newline="") as stream:
        stream.write(text)


def write_html(filename: str, config: Config, results: Sequence[Result]) -> None:
    """Write an HTML report of the results."""
    rows = []
    for result in colorize_results(results):
        ffuf_hash = ""
        inputs = {}
        for key, value in result.input.items():
            if key == HASH_KEYWORD:
                ffuf_hash = _text(value)
            else:
                inputs[key] = _text(value)
        rows.append(_row(result, inputs, ffuf_hash, escape=True))
    _render(filename, HTML_TEMPLATE, config, rows)


def write_markdown(filename: str, config: Config, results: Sequence[Result]) -> None:
    """Write a Markdown report of the results.

    A result without a hash input shows the hash of the last result that had one.
    """
    rows = []
    ffuf_hash = ""
    for result in results:
        inputs = {}
        for key, value in result.input.items():
            if key == HASH_KEYWORD:
                ffuf_hash = _text(value)
            else:
                inputs[key] = _text(value)
        rows.append(_row(result, inputs, ffuf_hash, escape=False))
    _render(filename, MARKDOWN_TEMPLATE, config, rows)