import pytest

from fuzzwell.filters import (
    FilterError,
    LineFilter,
    RegexpFilter,
    SizeFilter,
    StatusFilter,
    TimeFilter,
    WordFilter,
)
from fuzzwell.models import Request, Response


def test_new_line_filter():
    f = LineFilter("200,301,400-410,500")
    assert "200,301,400-410,500" in str(f)


def test_new_line_filter_error():
    with pytest.raises(FilterError):
        LineFilter("invalid")


@pytest.mark.parametrize(
    "count, expected",
    [(200, True), (301, True), (500, True), (4, False), (444, True),
     (302, False), (401, False), (402, True), (450, True), (451, False)],
)
def test_line_filtering(count, expected):
    f = LineFilter("200,301,402-450,500")
    resp = Response(data="\n".join(["A"] * count).encode())
    assert f.filter(resp) is expected


def test_new_regexp_filter():
    f = RegexpFilter("s([a-z]+)arch")
    assert "s([a-z]+)arch" in str(f)


def test_new_regexp_filter_error():
    with pytest.raises(FilterError):
        RegexpFilter("r((")


@pytest.mark.parametrize(
    "text, expected",
    [("search", True), ("text and search", True), ("sbarch in beginning", True),
     ("midd scarch le", True), ("s1arch", False), ("invalid", False)],
)
def test_regexp_filtering(text, expected):
    f = RegexpFilter("s([a-z]+)arch")
    resp = Response(data=text.encode(), request=Request(input={}))
    assert f.filter(resp) is expected


def test_regexp_keyword_substitution_is_escaped():
    f = RegexpFilter("value=FUZZ")
    req = Request(input={"FUZZ": b"a.b"})
    assert f.filter(Response(data=b"value=a.b", request=req)) is True
    assert f.filter(Response(data=b"value=aXb", request=req)) is False


def test_regexp_matches_headers():
    f = RegexpFilter("X-Test: yes")
    resp = Response(headers={"X-Test": ["yes"]}, data=b"", request=Request())
    assert f.filter(resp) is True


def test_regexp_describe_and_dict():
    f = RegexpFilter("abc")
    assert f.describe() == "Regexp: abc"
    assert f.to_dict() == {"value": "abc"}


def test_new_size_filter():
    f = SizeFilter("1,2,3,444,5-90")
    assert "1,2,3,444,5-90" in str(f)


def test_new_size_filter_error():
    with pytest.raises(FilterError):
        SizeFilter("invalid")


@pytest.mark.parametrize(
    "size, expected",
    [(1, True), (2, True), (3, True), (4, False), (5, True),
     (70, True), (90, True), (91, False), (444, True)],
)
def test_size_filtering(size, expected):
    f = SizeFilter("1,2,3,5-90,444")
    assert f.filter(Response(content_length=size)) is expected


def test_size_describe_and_dict():
    f = SizeFilter("1,5-90")
    assert f.describe() == "Response size: 1,5-90"
    assert f.to_dict() == {"value": "1,5-90"}


def test_new_status_filter():
    f = StatusFilter("200,301,400-410,500")
    assert "200,301,400-410,500" in str(f)


def test_new_status_filter_error():
    with pytest.raises(FilterError):
        StatusFilter("invalid")


@pytest.mark.parametrize(
    "status, expected",
    [(200, True), (301, True), (500, True), (4, False), (399, False),
     (400, True), (444, True), (498, True), (499, False), (302, False)],
)
def test_status_filtering(status, expected):
    f = StatusFilter("200,301,400-498,500")
    assert f.filter(Response(status_code=status)) is expected


def test_status_all_matches_everything():
    f = StatusFilter("all")
    assert str(f) == "all"
    assert f.to_dict() == {"value": "all"}
    assert all(f.filter(Response(status_code=code)) for code in (100, 200, 404, 599))


def test_new_time_filter():
    f = TimeFilter(">100")
    assert f.greater_than is True
    assert f.less_than is False
    assert f.milliseconds == 100


def test_new_time_filter_error():
    with pytest.raises(FilterError):
        TimeFilter("100>")


@pytest.mark.parametrize("bad", ["200", "><100", ">abc", ">"])
def test_time_filter_rejects(bad):
    with pytest.raises(FilterError):
        TimeFilter(bad)


@pytest.mark.parametrize(
    "ms, expected",
    [(1342, True), (2000, True), (35000, True), (1458700, True), (99, False), (2, False)],
)
def test_time_filtering(ms, expected):
    f = TimeFilter(">100")
    resp = Response(data=b"dahhhhhtaaaaa", duration=ms * 1_000_000)
    assert f.filter(resp) is expected


def test_time_less_than():
    f = TimeFilter("<100")
    assert f.filter(Response(duration=99 * 1_000_000)) is True
    assert f.filter(Response(duration=100 * 1_000_000)) is False
    assert f.describe() == "Response time: <100"


def test_new_word_filter():
    f = WordFilter("200,301,400-410,500")
    assert "200,301,400-410,500" in str(f)


def test_new_word_filter_error():
    with pytest.raises(FilterError):
        WordFilter("invalid")


@pytest.mark.parametrize(
    "count, expected",
    [(200, True), (301, True), (500, True), (4, False), (444, True),
     (302, False), (401, False), (402, True), (450, True), (451, False)],
)
def test_word_filtering(count, expected):
    f = WordFilter("200,301,402-450,500")
    resp = Response(data=" ".join(["A"] * count).encode())
    assert f.filter(resp) is expected