"""HTTP runner that prepares fuzzed requests and measures the responses."""

from __future__ import annotations

import contextlib
import gzip
import time
import warnings
import zlib
from typing import Any
from urllib.parse import urlsplit

import brotli
import requests
from requests.adapters import HTTPAdapter

from fuzzwell.models import Config, Request, Response

MAX_DOWNLOAD_SIZE = 5242880
CLIENT_VERSION = "2.1.0"
USER_AGENT = f"Fuzz Faster U Fool v{CLIENT_VERSION}"

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
)


def _canonical_header_key(key: str) -> str:
    """Capitalise each dash-separated part; keys with non-token characters stay as they are."""
    if not key or any(char not in _TOKEN_CHARS for char in key):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


class _Adapter(HTTPAdapter):
    """Connection adapter that can override the TLS server name."""

    def __init__(self, server_hostname: str, **kwargs: Any) -> None:
        self._server_hostname = server_hostname
        super().__init__(**kwargs)

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        if self._server_hostname:
            kwargs["server_hostname"] = self._server_hostname
        super().init_poolmanager(*args, **kwargs)


def _decode_body(encoding: str, body: bytes | None) -> bytes | None:
    """Undo a content encoding; None means the body could not be read."""
    if body is None:
        return None
    if encoding == "gzip":
        try:
            return gzip.decompress(body)
        except gzip.BadGzipFile:
            return body
        except (EOFError, zlib.error):
            return None
    if encoding == "br":
        try:
            return brotli.decompress(body)
        except brotli.error:
            return None
    if encoding == "deflate":
        inflater = zlib.decompressobj(-zlib.MAX_WBITS)
        try:
            data = inflater.decompress(body) + inflater.flush()
        except zlib.error:
            return None
        return data if inflater.eof else None
    return body


def _dump_request(prepared: requests.PreparedRequest) -> bytes:
    lines = [f"{prepared.method} {prepared.path_url} HTTP/1.1"]
    if "Host" not in prepared.headers:
        lines.append(f"Host: {urlsplit(prepared.url or '').netloc}")
    lines.extend(f"{name}: {value}" for name, value in prepared.headers.items())
    head = ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8", "replace")
    body = prepared.body or b""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return head + body


def _response_headers(http_response: requests.Response) -> dict[str, list[str]]:
    raw_headers = http_response.raw.headers
    return {
        _canonical_header_key(name): list(raw_headers.getlist(name)) for name in raw_headers.keys()
    }


def _dump_response(
    http_response: requests.Response, headers: dict[str, list[str]], body: bytes | None
) -> str:
    version = {10: "1.0", 11: "1.1", 20: "2.0"}.get(getattr(http_response.raw, "version", 11), "1.1")
    lines = [f"HTTP/{version} {http_response.status_code} {http_response.reason or ''}".rstrip()]
    lines.extend(f"{name}: {value}" for name, values in headers.items() for value in values)
    text = "\r\n".join(lines) + "\r\n\r\n"
    return text + (body or b"").decode("utf-8", "replace")


class SimpleRunner:
    """Sends requests without following redirects unless configured to."""

    def __init__(self, config: Config, replay: bool = False) -> None:
        self.config = config
        self.session = requests.Session()
        self.session.verify = False
        self.session.headers["Accept-Encoding"] = "gzip"
        adapter = _Adapter(config.sni, pool_connections=1000, pool_maxsize=500)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        proxy = config.replay_proxy_url if replay else config.proxy_url
        self._proxies = {"http": proxy, "https": proxy} if proxy else None
        self._cert = (
            (config.client_cert, config.client_key)
            if config.client_cert and config.client_key
            else None
        )

    def prepare(self, inputs: dict[str, bytes], base_request: Request) -> Request:
        """Return a copy of the base request with every keyword replaced by its input."""
        request = base_request.copy()
        for keyword, item in inputs.items():
            text = item.decode("utf-8", "surrogateescape")
            request.method = request.method.replace(keyword, text)
            request.headers = {
                _canonical_header_key(name.replace(keyword, text)): value.replace(keyword, text)
                for name, value in request.headers.items()
            }
            request.url = request.url.replace(keyword, text)
            request.data = request.data.replace(keyword.encode("utf-8"), item)
        request.input = inputs
        return request

    def _prepare_http(self, request: Request) -> requests.PreparedRequest:
        request.headers.setdefault("User-Agent", USER_AGENT)
        if "Host" in request.headers:
            host = request.headers["Host"]
        else:
            host = urlsplit(request.url).netloc
        headers = {_canonical_header_key(name): value for name, value in request.headers.items()}
        prepared = self.session.prepare_request(
            requests.Request(request.method, request.url, headers=headers, data=request.data)
        )
        request.host = host
        return prepared

    def _send_options(self, url: str) -> dict[str, Any]:
        if self._proxies is not None:
            proxies = self._proxies
        else:
            proxies = self.session.merge_environment_settings(url, {}, None, None, None)["proxies"]
        return {
            "stream": True,
            "timeout": self.config.timeout,
            "verify": False,
            "cert": self._cert,
            "proxies": proxies,
            "allow_redirects": self.config.follow_redirects,
        }

    def execute(self, request: Request) -> Response:
        """Send the request and measure the response; raise requests exceptions on failure."""
        prepared = self._prepare_http(request)
        if self.config.raw:
            prepared.url = request.url
        raw_request = _dump_request(prepared) if self.config.output_directory else b""
        options = self._send_options(prepared.url or "")
        start = time.perf_counter_ns()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            http_response = self.session.send(prepared, **options)
        first_byte = time.perf_counter_ns() - start

        with contextlib.closing(http_response):
            headers = _response_headers(http_response)
            response = Response(
                status_code=http_response.status_code,
                headers=headers,
                content_type=(headers.get("Content-Type") or [""])[0],
                request=request,
            )
            length_header = (headers.get("Content-Length") or [""])[0]
            try:
                size: int | None = int(length_header)
            except ValueError:
                size = None
            if size is not None:
                response.content_length = size
                if self.config.ignore_body or size > MAX_DOWNLOAD_SIZE:
                    response.cancelled = True
                    return response

            body: bytes | None
            try:
                body = http_response.raw.read(decode_content=False)
            except Exception:  # a body that cannot be read leaves the data empty
                body = None

            if self.config.output_directory:
                request.raw = raw_request.decode("utf-8", "replace")
                response.raw = _dump_response(http_response, headers, body)

            encoding = (headers.get("Content-Encoding") or [""])[0]
            decoded = _decode_body(encoding, body)
            if decoded is not None:
                response.content_length = len(decoded)
                response.data = decoded

        response.content_words = response.data.count(b" ") + 1
        response.content_lines = response.data.count(b"\n") + 1
        response.duration = first_byte
        return response

    def dump(self, request: Request) -> bytes:
        """Return the request as it would be written to the wire."""
        return _dump_request(self._prepare_http(request))


def new_runner_by_name(name: str, config: Config, replay: bool = False) -> SimpleRunner:
    """Create a runner; only the simple runner exists."""
    return SimpleRunner(config, replay)