"""Terminal output of job progress and results, and saving results to files."""

from __future__ import annotations

import hashlib
import json
import os
import sys
import time
from collections.abc import Callable, Sequence

from fuzzwell.models import Config, Progress, Response, Result, result_from_response
from fuzzwell.runner import CLIENT_VERSION
from fuzzwell.tabular import write_csv, write_ejson, write_json
from fuzzwell.templated import write_html, write_markdown

if os.name == "nt":
    TERMINAL_CLEAR_LINE = "\r\r"
    ANSI_CLEAR = ""
    ANSI_RED = ""
    ANSI_GREEN = ""
    ANSI_BLUE = ""
    ANSI_YELLOW = ""
else:
    TERMINAL_CLEAR_LINE = "\r\x1b[2K"
    ANSI_CLEAR = "\x1b[0m"
    ANSI_RED = "\x1b[31m"
    ANSI_GREEN = "\x1b[32m"
    ANSI_BLUE = "\x1b[34m"
    ANSI_YELLOW = "\x1b[33m"

BANNER_HEADER = r"""
        /'___\  /'___\           /'___\       
       /\ \__/ /\ \__/  __  __  /\ \__/       
       \ \ ,__\\ \ ,__\/\ \/\ \ \ \ ,__\      
        \ \ \_/ \ \ \_/\ \ \_\ \ \ \ \_/      
         \ \_\   \ \_\  \ \____/  \ \_\       
          \/_/    \/_/   \/___/    \/_/       
"""
BANNER_SEP = "________________________________________________"

ALL_EXTENSIONS = ".{json,ejson,html,md,csv,ecsv}"
RESULT_SEPARATOR = "\n---- ↑ Request ---- Response ↓ ----\n\n"

Writer = Callable[[str, Config, Sequence[Result]], None]


def _milliseconds(nanoseconds: int) -> int:
    whole = abs(nanoseconds) // 1_000_000
    return -whole if nanoseconds < 0 else whole


def _text(data: bytes) -> str:
    return data.decode("utf-8", "replace")


def _print_option(name: str, value: str) -> None:
    sys.stderr.write(f" :: {name:<16} : {value}\n")


def _write_ecsv(filename: str, config: Config, results: Sequence[Result]) -> None:
    write_csv(filename, config, results, True)


def _write_plain_csv(filename: str, config: Config, results: Sequence[Result]) -> None:
    write_csv(filename, config, results, False)


_WRITERS: dict[str, Writer] = {
    "json": write_json,
    "ejson": write_ejson,
    "html": write_html,
    "md": write_markdown,
    "csv": _write_plain_csv,
    "ecsv": _write_ecsv,
}


class StandardOutput:
    """Prints progress and results to the terminal and keeps the results of the job."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.results: list[Result] = []
        self.current_results: list[Result] = []
        self.keywords = sorted(provider.keyword for provider in config.input_providers)

    def banner(self) -> None:
        """Print the banner and a summary of the configuration to standard error."""
        config = self.config
        version = CLIENT_VERSION.replace("<3", f"{ANSI_RED}<3{ANSI_CLEAR}")
        sys.stderr.write(f"{BANNER_HEADER}\n       v{version}\n{BANNER_SEP}\n\n")
        _print_option("Method", config.method)
        _print_option("URL", config.url)
        for provider in config.input_providers:
            if provider.name == "wordlist":
                _print_option("Wordlist", f"{provider.keyword}: {provider.value}")
        for name, value in config.headers.items():
            _print_option("Header", f"{name}: {value}")
        if config.data:
            _print_option("Data", config.data)
        if config.extensions:
            _print_option("Extensions", "".join(f"{ext} " for ext in config.extensions))
        if config.output_file:
            output_file = config.output_file
            if config.output_format == "all":
                output_file += ALL_EXTENSIONS
            _print_option("Output file", output_file)
            _print_option("File format", config.output_format)
        _print_option("Follow redirects", str(config.follow_redirects).lower())
        _print_option("Calibration", str(config.auto_calibration).lower())
        if config.proxy_url:
            _print_option("Proxy", config.proxy_url)
        if config.replay_proxy_url:
            _print_option("ReplayProxy", config.replay_proxy_url)
        _print_option("Timeout", str(config.timeout))
        _print_option("Threads", str(config.threads))
        if config.has_delay:
            if config.delay_is_range:
                delay = f"{config.delay_min:.2f} - {config.delay_max:.2f} seconds"
            else:
                delay = f"{config.delay_min:.2f} seconds"
            _print_option("Delay", delay)
        manager = config.matcher_manager
        if manager is not None:
            for matcher in manager.matchers.values():
                _print_option("Matcher", matcher.describe())
            for flt in manager.filters.values():
                _print_option("Filter", flt.describe())
        sys.stderr.write(f"{BANNER_SEP}\n\n")

    def reset(self) -> None:
        """Forget the results of the current job."""
        self.current_results = []

    def cycle(self) -> None:
        """Move the current job's results to the kept results."""
        self.results.extend(self.current_results)
        self.reset()

    def progress(self, status: Progress) -> None:
        """Print a progress line unless quiet; ``started_at`` is a Unix timestamp."""
        if self.config.quiet:
            return
        elapsed = max(0.0, time.time() - status.started_at)
        total_seconds = int(elapsed)
        req_rate = status.req_sec if total_seconds > 0 else 0
        hours, rest = divmod(total_seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        sys.stderr.write(
            f"{TERMINAL_CLEAR_LINE}:: Progress: [{status.req_count}/{status.req_total}]"
            f" :: Job [{status.queue_pos}/{status.queue_total}] :: {req_rate} req/sec"
            f" :: Duration: [{hours}:{minutes:02d}:{seconds:02d}]"
            f" :: Errors: {status.error_count} ::"
        )

    def _message(self, label: str, color: str, text: str, trailer: str) -> None:
        if self.config.quiet:
            sys.stderr.write(text)
        elif not self.config.colors:
            sys.stderr.write(f"{TERMINAL_CLEAR_LINE}[{label}] {text}{trailer}")
        else:
            sys.stderr.write(f"{TERMINAL_CLEAR_LINE}[{color}{label}{ANSI_CLEAR}] {text}{trailer}")

    def info(self, text: str) -> None:
        self._message("INFO", ANSI_BLUE, text, "\n\n")

    def error(self, text: str) -> None:
        self._message("ERR", ANSI_RED, text, "\n")

    def warning(self, text: str) -> None:
        self._message("WARN", ANSI_RED, text, "\n")

    def raw(self, text: str) -> None:
        sys.stderr.write(f"{TERMINAL_CLEAR_LINE}{text}")

    def _write_to_all(self, results: Sequence[Result]) -> None:
        base = self.config.output_file
        for extension, writer in _WRITERS.items():
            self.config.output_file = f"{base}.{extension}"
            try:
                writer(self.config.output_file, self.config, results)
            except OSError as exc:
                self.error(str(exc))

    def save_file(self, filename: str, fmt: str) -> None:
        """Save all results in the given format; raise OSError when the file cannot be written.

        The format ``all`` writes every format next to the configured output file.
        """
        if self.config.output_skip_empty_file and not self.results:
            self.info("No results and -or defined, output file not written.")
            return
        results = [*self.results, *self.current_results]
        if fmt == "all":
            self._write_to_all(results)
            return
        writer = _WRITERS.get(fmt)
        if writer is not None:
            writer(filename, self.config, results)

    def finalize(self) -> None:
        """Save the results if an output file is configured."""
        if self.config.output_file:
            try:
                self.save_file(self.config.output_file, self.config.output_format)
            except OSError as exc:
                self.error(str(exc))
        if not self.config.quiet:
            sys.stderr.write("\n")

    def result(self, response: Response) -> None:
        """Record a matching response and print it."""
        if self.config.output_directory:
            response.result_file = self._write_result_to_file(response)
        result = result_from_response(response)
        self.current_results.append(result)
        self.print_result(result)

    def _write_result_to_file(self, response: Response) -> str:
        directory = self.config.output_directory
        try:
            os.makedirs(directory, mode=0o750, exist_ok=True)
        except OSError as exc:
            self.error(str(exc))
            return ""
        request_raw = response.request.raw if response.request is not None else ""
        content = f"{request_raw}{RESULT_SEPARATOR}{response.raw}".encode("utf-8")
        name = hashlib.md5(content).hexdigest()
        path = os.path.join(directory, name)
        try:
            descriptor = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o640)
            with os.fdopen(descriptor, "wb") as stream:
                stream.write(content)
        except OSError as exc:
            self.error(str(exc))
        return name

    def print_result(self, result: Result) -> None:
        """Print a result in the style the configuration asks for."""
        config = self.config
        if config.json_output:
            self._result_json(result)
        elif config.quiet:
            print(self._inputs_one_line(result))
        elif (
            len(self.keywords) > 1
            or config.verbose
            or config.output_directory
            or result.scraper_data
        ):
            self._result_multiline(result)
        else:
            self._result_normal(result)

    def _input_text(self, result: Result, keyword: str) -> str:
        if keyword in self.config.command_keywords:
            return str(result.position)
        return _text(result.input.get(keyword, b""))

    def _inputs_one_line(self, result: Result) -> str:
        if len(self.keywords) > 1:
            return "".join(f"{k} : {self._input_text(result, k)} " for k in self.keywords)
        inputs = ""
        for keyword in self.keywords:
            inputs = self._input_text(result, keyword)
        return inputs

    def _summary(self, result: Result) -> str:
        return (
            f"[Status: {result.status_code}, Size: {result.content_length}, "
            f"Words: {result.content_words}, Lines: {result.content_lines}, "
            f"Duration: {_milliseconds(result.duration)}ms]"
        )

    def _result_multiline(self, result: Result) -> None:
        header = (
            f"{TERMINAL_CLEAR_LINE}{self._colorize(result.status_code)}"
            f"{self._summary(result)}{ANSI_CLEAR}"
        )
        lines = []
        if self.config.verbose:
            lines.append(f"{TERMINAL_CLEAR_LINE}| URL | {result.url}\n")
            if result.redirect_location:
                lines.append(f"{TERMINAL_CLEAR_LINE}| --> | {result.redirect_location}\n")
        if result.result_file:
            lines.append(f"{TERMINAL_CLEAR_LINE}| RES | {result.result_file}\n")
        for keyword in self.keywords:
            lines.append(
                f"{TERMINAL_CLEAR_LINE}    * {keyword}: {self._input_text(result, keyword)}\n"
            )
        if result.scraper_data:
            lines.append(f"{TERMINAL_CLEAR_LINE}| SCR |\n")
            for name, values in result.scraper_data.items():
                for value in values:
                    lines.append(f"{TERMINAL_CLEAR_LINE}    * {name}: {value}\n")
        sys.stdout.write(f"{header}\n{''.join(lines)}\n")

    def _result_normal(self, result: Result) -> None:
        print(
            f"{TERMINAL_CLEAR_LINE}{self._colorize(result.status_code)}"
            f"{self._inputs_one_line(result):<23} {self._summary(result)}{ANSI_CLEAR}"
        )

    def _result_json(self, result: Result) -> None:
        try:
            text = json.dumps(result.to_dict(base64_input=True), separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            self.error(str(exc))
            return
        sys.stderr.write(TERMINAL_CLEAR_LINE)
        print(text)

    def _colorize(self, status: int) -> str:
        if not self.config.colors:
            return ""
        if 200 <= status < 300:
            return ANSI_GREEN
        if 300 <= status < 400:
            return ANSI_BLUE
        if 400 <= status < 500:
            return ANSI_YELLOW
        if 500 <= status < 600:
            return ANSI_RED
        return ANSI_CLEAR


def new_output_provider_by_name(name: str, config: Config) -> StandardOutput:
    """Create an output provider; only the standard output provider exists."""
    return StandardOutput(config)