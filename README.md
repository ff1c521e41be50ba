# fuzzwell

Building blocks for web content fuzzing. Words come from wordlists or
from external commands. They are put into HTTP requests. Responses are
kept or dropped by status, size, word count, line count, regular
expression or timing. Data can be scraped out of responses, and results
can be saved as JSON, CSV, HTML or Markdown.

## Installation

```
pip install .
```

To install the test suite's dependencies as well: `pip install .[test]`.

## Modules

- `fuzzwell.models`
  - Data types: `Config`, `InputProviderConfig`, `Request`, `Response`, `Result`, `ScraperResult`, `Progress` and `ValueRange`.
  - `parse_value_range` reads values such as `200` or `400-410`.
  - `format_duration` renders nanoseconds as text such as `123ns` or `1.5ms`.
  - `result_from_response` builds a `Result` from a `Response`.
- `fuzzwell.filters`
  - `StatusFilter`, `SizeFilter`, `WordFilter`, `LineFilter`, `RegexpFilter` and `TimeFilter`. Each has `filter(response)`, `describe()` and `to_dict()`.
  - Range values are comma separated, for example `200,301,400-410`.
  - The status filter also accepts `all`.
  - The time filter takes `>N` or `<N` milliseconds, measured to the first byte of the response.
  - A bad value raises `FilterError`.
- `fuzzwell.matchers`
  - `MatcherManager` holds matchers, filters and per-domain filters.
  - Adding a value to an existing matcher or filter of the same name appends to it. `add_filter(..., replace=True)` replaces it.
  - `new_filter_by_name` builds a filter from one of the names `status`, `size`, `word`, `line`, `regexp` or `time`, together with a value.
- `fuzzwell.wordlist`
  - `WordlistInput` reads one word per line from a file, or from standard input when the path is `-`.
  - It can strip comments with `strip_comments`.
  - It appends extensions to `FUZZ` words.
  - In dirsearch-compatible mode it expands `%EXT%`.
- `fuzzwell.command`
  - `CommandInput` runs a shell command for every position and uses its standard output as the value.
  - The position is passed to the command in the `FFUF_NUM` environment variable.
- `fuzzwell.providers`
  - `MainInputProvider` combines the input sources in `clusterbomb`, `sniper` or `pitchfork` mode.
  - It can run each value through a chain of encoders, such as `b64encode`, `urlencode`, `hexencode`, `html`, `md5` or `sha256`.
  - An unknown mode raises `InputModeError`.
- `fuzzwell.runner`
  - `SimpleRunner.prepare` puts the inputs into a copy of a base request.
  - `execute` sends the request and measures the response. It decodes gzip, brotli and deflate bodies.
  - `dump` renders the request as text.
  - Redirects are followed only when the configuration asks for it.
- `fuzzwell.scraper`
  - `Scraper` rules extract values with regular expressions or CSS selectors.
  - Rules are read from JSON group files with `read_group_from_file`, or from a whole directory with `scraper_from_dir`.
- `fuzzwell.tabular`
  - `write_json`, `write_ejson`, `write_csv` and `to_csv_row`.
- `fuzzwell.templated`
  - `write_html`, `write_markdown` and `colorize_results`.
- `fuzzwell.stdout`
  - `StandardOutput` prints the banner, progress, messages and results to the terminal.
  - It keeps the results and saves them with `save_file` in any of the formats above, or in all of them at once with `all`.

## Example

```python
from fuzzwell.matchers import MatcherManager
from fuzzwell.models import Response

manager = MatcherManager()
manager.add_matcher("status", "200-299,301")
manager.add_filter("size", "0")

response = Response(status_code=200, content_length=512)
matched = all(m.filter(response) for m in manager.matchers.values())
filtered = any(f.filter(response) for f in manager.filters.values())
print(matched and not filtered)  # True
```

The regexp filter replaces each fuzz keyword in its pattern with the
escaped input of the request. A pattern such as `FUZZ` therefore matches
responses that echo the word that was sent.

## What the package does not do

There is no command-line tool. You assemble the pieces yourself.

The package has no job loop and does not send requests in parallel. It
has no request rate limiting, automatic calibration, job queue or
interactive console. Those have to be built on top of the runner, the
input providers, the matcher manager and the output classes.