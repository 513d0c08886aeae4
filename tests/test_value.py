import pytest

import dyncsv
from dyncsv import Value, ValueLimiter, ValueType

N = Value.number
T = Value.text


def limiter(*attributes):
    return ValueLimiter.from_schema_row(list(attributes))


def test_value_from_str_number_and_empty():
    assert Value.from_str("12", ValueType.NUMBER) == N(12)
    assert Value.from_str("-3", ValueType.NUMBER) == N(-3)
    assert Value.from_str("", ValueType.NUMBER) == N(0)
    assert Value.from_str("12", ValueType.TEXT) == T("12")


def test_value_from_str_rejects_floats_and_words():
    for src in ("1.5", "abc", " 1"):
        with pytest.raises(dyncsv.InvalidValueType) as exc:
            Value.from_str(src, ValueType.NUMBER)
        assert "not a valid number" in str(exc.value)


def test_value_constructors_check_payload():
    with pytest.raises(dyncsv.InvalidValueType):
        N(True)
    with pytest.raises(dyncsv.InvalidValueType):
        T(3)


def test_value_equality_and_ordering():
    assert N(1) != T("1")
    assert N(100) < T("")
    assert T("a") < T("b")
    assert sorted([T("b"), N(2), T("a"), N(-1)]) == [N(-1), N(2), T("a"), T("b")]
    assert str(N(42)) == "42"
    assert Value.empty(ValueType.NUMBER) == N(0)
    assert Value.empty(ValueType.TEXT) == T("")


def test_value_type_parsing_is_strict():
    assert ValueType.from_str("NUMBER") is ValueType.NUMBER
    assert ValueType.from_str("Text") is ValueType.TEXT
    with pytest.raises(dyncsv.InvalidValueType):
        ValueType.from_str("num")
    assert str(ValueType.NUMBER) == "Number"


def test_display_width_counts_wide_and_combining_chars():
    assert dyncsv.display_width("abc") == 3
    assert dyncsv.display_width("한글") == 4
    assert dyncsv.display_width("é") == 1
    assert T("日本").width == 4


def test_limiter_variant_qualify():
    lim = limiter("number", "1", "1 2 3", "")
    assert lim.get_default() == N(1)
    assert lim.get_variant() == [N(1), N(2), N(3)]
    assert lim.qualify(N(2))
    assert not lim.qualify(N(4))
    assert not lim.qualify(T("2"))


def test_limiter_pattern_qualify_searches_string_form():
    lim = limiter("text", "abc", "", "^a")
    assert lim.qualify(T("apple"))
    assert not lim.qualify(T("banana"))

    num = limiter("number", "10", "", "0$")
    assert num.qualify(N(250))
    assert not num.qualify(N(251))


def test_limiter_without_constraint_only_checks_type():
    lim = limiter("text", "", "", "")
    assert lim.get_default() is None
    assert lim.qualify(T("anything"))
    assert not lim.qualify(N(1))


def test_limiter_schema_row_length():
    with pytest.raises(dyncsv.InvalidRowData) as exc:
        ValueLimiter.from_schema_row(["text", "", ""])
    assert "needs 4 attributes" in str(exc.value)


def test_limiter_constraint_needs_default():
    with pytest.raises(dyncsv.InvalidLimiter) as exc:
        limiter("text", "", "x y", "")
    assert "needs default value" in str(exc.value)
    with pytest.raises(dyncsv.InvalidLimiter):
        limiter("text", "", "", "^a")


def test_limiter_default_must_satisfy_constraint():
    with pytest.raises(dyncsv.InvalidLimiter) as exc:
        limiter("text", "z", "x y", "")
    assert "among one of variants" in str(exc.value)
    with pytest.raises(dyncsv.InvalidLimiter) as exc:
        limiter("text", "zzz", "", "^a")
    assert "match pattern" in str(exc.value)

    num = ValueLimiter(ValueType.NUMBER)
    with pytest.raises(dyncsv.InvalidLimiter) as exc:
        num.set_pattern(T("abc"), "a")
    assert "doesn't match limiter type" in str(exc.value)
    with pytest.raises(dyncsv.InvalidLimiter) as exc:
        num.set_variant(T("1"), [T("1"), N(2)])
    assert "doesn't match limiter type" in str(exc.value)
    assert num.get_default() is None
    assert num.get_pattern() is None and num.get_variant() is None


def test_limiter_type_change_drops_constraints():
    lim = ValueLimiter(ValueType.NUMBER)
    lim.set_variant(N(1), [N(1), N(2)])
    lim.set_type(ValueType.NUMBER)
    assert lim.get_variant() == [N(1), N(2)]

    lim.set_type(ValueType.TEXT)
    assert lim.get_type() is ValueType.TEXT
    assert lim.get_default() is None
    assert lim.get_variant() is None
    assert lim.qualify(T("anything"))


def test_limiter_bad_pattern_and_bad_number():
    with pytest.raises(dyncsv.InvalidLimiter) as exc:
        limiter("text", "a", "", "(")
    assert "Invalid pattern" in str(exc.value)
    with pytest.raises(dyncsv.InvalidValueType):
        limiter("number", "one", "", "")
    with pytest.raises(dyncsv.InvalidValueType):
        limiter("float", "", "", "")


def test_limiter_is_convertible():
    num = ValueLimiter(ValueType.NUMBER)
    assert num.is_convertible(T("")) is ValueType.NUMBER
    assert num.is_convertible(T("-12")) is ValueType.NUMBER
    assert num.is_convertible(T("x1")) is None
    assert num.is_convertible(N(3)) is ValueType.NUMBER

    text = ValueLimiter(ValueType.TEXT)
    assert text.is_convertible(N(3)) is ValueType.TEXT


def test_limiter_setters_keep_variant_and_pattern_exclusive():
    lim = ValueLimiter(ValueType.TEXT)
    lim.set_variant(T("x"), [T("x"), T("y")])
    lim.set_pattern(T("abc"), "^a")
    assert lim.get_variant() is None
    assert lim.get_pattern().pattern == "^a"
    with pytest.raises(dyncsv.InvalidLimiter):
        lim.set_default(T("zzz"))
    with pytest.raises(dyncsv.InvalidLimiter):
        lim.set_default(N(1))


def test_limiter_schema_fields_round_trip():
    for attrs in (
        ["Number", "2", "1 2 3", ""],
        ["Text", "abc", "", "^a.*c$"],
        ["Text", "", "", ""],
        ["Number", "7", "", ""],
    ):
        lim = limiter(*attrs)
        assert lim.to_schema_fields() == attrs
        assert ValueLimiter.from_schema_row(lim.to_schema_fields()) == lim


def test_limiter_str():
    text = str(limiter("text", "x", "x y", ""))
    assert "type : Text" in text
    assert "default value" in text
    assert "variants" in text
