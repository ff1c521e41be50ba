import gzip
import threading
import zlib
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from fuzzwell.models import Config, Request
from fuzzwell.runner import (
    MAX_DOWNLOAD_SIZE,
    USER_AGENT,
    SimpleRunner,
    new_runner_by_name,
)

BODY = b"one two three\nfour five"


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def _send(self, status, body, extra=()):
        self.send_response(status)
        for name, value in extra:
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        if self.path == "/echo":
            self._send(200, self.headers.get("User-Agent", "").encode())
        elif self.path == "/gzip":
            self._send(200, gzip.compress(BODY), [("Content-Encoding", "gzip")])
        elif self.path == "/deflate":
            compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
            data = compressor.compress(BODY) + compressor.flush()
            self._send(200, data, [("Content-Encoding", "deflate")])
        elif self.path == "/redirect":
            self._send(301, b"", [("Location", "/plain")])
        else:
            self._send(200, BODY, [("Content-Type", "text/plain")])

    def do_POST(self):
        length = int(self.headers.get("Content-Length", "0"))
        self._send(200, self.rfile.read(length))

    def log_message(self, *args):
        pass


@pytest.fixture
def base_url(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def test_prepare_replaces_keywords():
    base = Request(
        method="FUZZ",
        url="http://example.com/FUZZ",
        headers={"x-fuzz-FUZZ": "val FUZZ"},
        data=b"a=FUZZ",
    )
    runner = SimpleRunner(Config())
    prepared = runner.prepare({"FUZZ": b"admin"}, base)
    assert prepared.method == "admin"
    assert prepared.url == "http://example.com/admin"
    assert prepared.headers == {"X-Fuzz-Admin": "val admin"}
    assert prepared.data == b"a=admin"
    assert prepared.input == {"FUZZ": b"admin"}
    assert base.url == "http://example.com/FUZZ"


def test_prepare_keeps_header_keys_with_invalid_characters():
    base = Request(url="http://example.com/", headers={"bad key": "v"})
    prepared = SimpleRunner(Config()).prepare({"X": b"y"}, base)
    assert prepared.headers == {"bad key": "v"}


def test_execute_sets_default_user_agent(base_url):
    request = Request(url=base_url + "/echo")
    response = SimpleRunner(Config()).execute(request)
    assert response.status_code == 200
    assert response.data == USER_AGENT.encode()
    assert request.headers["User-Agent"] == USER_AGENT
    assert response.request is request


def test_execute_measures_body(base_url):
    response = SimpleRunner(Config()).execute(Request(url=base_url + "/plain"))
    assert response.data == BODY
    assert response.content_length == len(BODY)
    assert response.content_words == len(BODY.split(b" "))
    assert response.content_lines == len(BODY.split(b"\n"))
    assert response.content_type == "text/plain"
    assert response.duration >= 0
    assert response.request.host == base_url.split("//")[1]


@pytest.mark.parametrize("path", ["/gzip", "/deflate"])
def test_execute_decodes_content(base_url, path):
    response = SimpleRunner(Config()).execute(Request(url=base_url + path))
    assert response.data == BODY
    assert response.content_length == len(BODY)


def test_execute_ignore_body_cancels(base_url):
    response = SimpleRunner(Config(ignore_body=True)).execute(Request(url=base_url + "/plain"))
    assert response.cancelled
    assert response.data == b""
    assert response.content_length == len(BODY)
    assert MAX_DOWNLOAD_SIZE == 5242880


def test_execute_does_not_follow_redirects(base_url):
    response = SimpleRunner(Config()).execute(Request(url=base_url + "/redirect"))
    assert response.status_code == 301
    assert response.redirect_location(False) == "/plain"


def test_execute_follows_redirects_when_configured(base_url):
    runner = SimpleRunner(Config(follow_redirects=True))
    response = runner.execute(Request(url=base_url + "/redirect"))
    assert response.status_code == 200
    assert response.data == BODY


def test_execute_records_raw_dumps(base_url, tmp_path):
    runner = SimpleRunner(Config(output_directory=str(tmp_path)))
    response = runner.execute(Request(url=base_url + "/plain"))
    assert response.raw.startswith("HTTP/1.1 200")
    assert response.raw.endswith(BODY.decode())
    assert response.request.raw.startswith("GET /plain HTTP/1.1")


def test_execute_post_body(base_url):
    response = SimpleRunner(Config()).execute(
        Request(method="POST", url=base_url + "/post", data=BODY)
    )
    assert response.data == BODY


def test_execute_invalid_url_raises():
    with pytest.raises(requests.exceptions.RequestException):
        SimpleRunner(Config()).execute(Request(url="not a url"))


def test_execute_connection_refused_raises(base_url):
    runner = SimpleRunner(Config(timeout=2))
    with pytest.raises(requests.exceptions.ConnectionError):
        runner.execute(Request(url="http://127.0.0.1:1/"))


def test_dump_contains_request_line_and_body():
    request = Request(method="POST", url="http://example.com/path?q=1", data=b"payload")
    dumped = SimpleRunner(Config()).dump(request)
    assert dumped.startswith(b"POST /path?q=1 HTTP/1.1\r\n")
    assert dumped.endswith(b"\r\n\r\npayload")
    assert f"User-Agent: {USER_AGENT}".encode() in dumped
    assert request.host == "example.com"


def test_dump_uses_host_header():
    request = Request(url="http://example.com/", headers={"Host": "other.example.com"})
    dumped = SimpleRunner(Config()).dump(request)
    assert b"Host: other.example.com" in dumped
    assert request.host == "other.example.com"


def test_new_runner_by_name_uses_replay_proxy():
    config = Config(proxy_url="http://localhost:8080", replay_proxy_url="http://localhost:9090")
    runner = new_runner_by_name("simple", config, True)
    assert isinstance(runner, SimpleRunner)
    assert runner.config is config
    assert runner._proxies == {"http": config.replay_proxy_url, "https": config.replay_proxy_url}