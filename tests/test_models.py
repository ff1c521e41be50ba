import base64

import pytest

from fuzzwell.models import (
    Config,
    InputProviderConfig,
    Request,
    Response,
    Result,
    ValueRange,
    format_duration,
    parse_value_range,
    result_from_response,
)


def test_parse_range():
    assert parse_value_range("5-9") == ValueRange(5, 9)


def test_parse_single():
    assert parse_value_range("42") == ValueRange(42, 42)


@pytest.mark.parametrize("bad", ["invalid", "5-", "1-2-3", "", "4x"])
def test_parse_invalid(bad):
    with pytest.raises(ValueError):
        parse_value_range(bad)


def test_value_range_str_and_contains():
    r = parse_value_range("5-9")
    assert str(r) == "5-9"
    assert 7 in r
    assert 10 not in r
    assert str(parse_value_range("42")) == "42"


def test_format_duration_nanoseconds():
    assert format_duration(123) == "123ns"


def test_format_duration_zero():
    assert format_duration(0) == "0s"


def test_format_duration_hour():
    assert format_duration(3_600_000_000_000) == "1h0m0s"


def test_format_duration_negative_mirrors_positive():
    assert format_duration(-123) == "-" + format_duration(123)


def test_redirect_location_non_redirect_is_empty():
    resp = Response(status_code=200, headers={"Location": ["/next"]})
    assert resp.redirect_location(False) == ""


def test_redirect_location_relative():
    resp = Response(status_code=301, headers={"location": ["/next"]})
    assert resp.redirect_location(False) == "/next"


def test_redirect_location_absolute():
    req = Request(url="http://example.com/a/b")
    resp = Response(status_code=302, headers={"Location": ["/next"]}, request=req)
    assert resp.redirect_location(True) == "http://example.com/next"


def test_request_copy_is_independent():
    req = Request(url="http://example.com/FUZZ", headers={"X": "1"}, input={"FUZZ": b"a"})
    copied = req.copy()
    copied.headers["X"] = "2"
    copied.input["FUZZ"] = b"b"
    assert req.headers["X"] == "1"
    assert req.input["FUZZ"] == b"a"
    assert copied.url == req.url


def test_result_from_response_copies_fields():
    req = Request(url="http://example.com/x", host="example.com", input={"FUZZ": b"x"}, position=7)
    resp = Response(
        status_code=301,
        headers={"Location": ["/y"]},
        content_length=3,
        content_words=4,
        content_lines=5,
        content_type="text/plain",
        request=req,
        duration=123,
        result_file="resultfile",
    )
    res = result_from_response(resp)
    assert res.position == 7
    assert res.status_code == 301
    assert res.redirect_location == "/y"
    assert (res.content_length, res.content_words, res.content_lines) == (3, 4, 5)
    assert res.url == "http://example.com/x"
    assert res.host == "example.com"
    assert res.duration == 123
    assert res.result_file == "resultfile"
    req.input["FUZZ"] = b"changed"
    assert res.input["FUZZ"] == b"x"


def test_result_to_dict_keys_and_values():
    res = Result(input={"FUZZ": b"abc"}, status_code=200, content_type="application/json")
    data = res.to_dict()
    assert data["input"] == {"FUZZ": "abc"}
    assert data["status"] == 200
    assert data["content-type"] == "application/json"


def test_result_to_dict_base64_round_trip():
    res = Result(input={"FUZZ": b"\x00\xffabc"})
    data = res.to_dict(base64_input=True)
    assert base64.b64decode(data["input"]["FUZZ"]) == b"\x00\xffabc"


def test_config_to_dict_reflects_fields():
    conf = Config(
        url="http://example.com/FUZZ",
        input_providers=[InputProviderConfig(keyword="FUZZ", value="words.txt")],
    )
    data = conf.to_dict()
    assert data["url"] == conf.url
    assert data["inputproviders"][0]["value"] == "words.txt"
    assert "matchers" not in data


def test_config_delay_flags():
    assert Config().has_delay is False
    conf = Config(delay_min=0.1, delay_max=0.5)
    assert conf.has_delay is True
    assert conf.delay_is_range is True