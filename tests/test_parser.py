import pytest

import dyncsv
from dyncsv import Parser, parse_text


def feed(*chunks, parser=None, **kwargs):
    parser = parser or Parser()
    rows = []
    for chunk in chunks:
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        row = parser.feed_chunk(chunk, **kwargs)
        if row is not None:
            rows.append(row)
    return rows


def test_quoted_delimiter_is_kept_in_field():
    assert feed('a,"b,c",d\n', consume_dquote=True) == [["a", "b,c", "d"]]


def test_escaped_quote_becomes_literal():
    assert feed('a,"b""c",d\n', consume_dquote=True) == [["a", 'b"c', "d"]]


def test_quotes_retained_without_consume():
    assert feed('a,"b,c",d\n') == [["a", '"b,c"', "d"]]
    assert feed('a,"b""c",d\n') == [["a", '"b""c"', "d"]]


def test_field_made_of_escaped_quotes():
    assert feed('"""a"""\n', consume_dquote=True) == [['"a"']]


def test_unterminated_quote_spans_chunks():
    parser = Parser()
    assert parser.feed_chunk(b'a,"b\n', consume_dquote=True) is None
    assert parser.in_quote
    assert parser.remnant == "b\n"
    assert parser.feed_chunk(b'c"\n', consume_dquote=True) == ["a", "b\nc"]
    assert not parser.in_quote


def test_crlf_is_normalized():
    assert feed("a,b\r\n") == [["a", "b"]]
    assert feed('"x\r\n', 'y"\r\n', consume_dquote=True) == [["x\ny"]]


def test_trailing_empty_field_is_emitted():
    assert feed("a,b,\n") == [["a", "b", ""]]
    assert feed("a,b,") == [["a", "b", ""]]
    assert feed("\n") == [[""]]


def test_last_line_without_delimiter():
    assert feed("1,2") == [["1", "2"]]
    assert feed('1,"2"', consume_dquote=True) == [["1", "2"]]


def test_custom_delimiters():
    parser = Parser(line_delimiter=";")
    assert feed("a|b;", "1|2", parser=parser, delimiter="|") == [["a", "b"], ["1", "2"]]


def test_invalid_utf8_is_fatal_unless_lossy():
    with pytest.raises(dyncsv.InvalidRowData) as exc:
        feed(b"a,\xff\n")
    assert "utf-8" in str(exc.value)
    assert feed(b"a,\xff\n", allow_invalid_string=True) == [["a", "\ufffd"]]


def test_reset_drops_remnant():
    parser = Parser()
    assert parser.feed_chunk(b'"open\n') is None
    parser.reset()
    assert not parser.in_quote
    assert parser.feed_chunk(b"x,y\n") == ["x", "y"]


def test_parse_text_skips_blank_lines():
    assert parse_text("a,b\n\n1,2") == [["a", "b"], ["1", "2"]]
    assert parse_text('a,"x,y"\n') == [["a", "x,y"]]


def test_parse_text_unterminated_quote():
    with pytest.raises(dyncsv.InvalidRowData) as exc:
        parse_text('a,"b')
    assert "Unterminated quote" in str(exc.value)
