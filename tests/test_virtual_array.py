import pytest

import dyncsv
from dyncsv import CellAlignType, Value, VirtualArray

T = Value.text


def make_array(names=("a", "b", "c"), rows=(("1", "2", "3"), ("4", "5", "6"))):
    array = VirtualArray()
    for idx, name in enumerate(names):
        array.insert_column(idx, name)
    for row in rows:
        array.insert_row(array.get_row_count(), [T(v) for v in row])
    return array


def test_duplicate_column_names_are_allowed():
    array = make_array(names=("a", "a"), rows=(("1", "2"),))
    assert str(array) == "a,a\n1,2"
    array.rename_column(1, "a")
    assert [c.name for c in array.columns] == ["a", "a"]


def test_insert_column_and_row_defaults():
    array = make_array()
    array.insert_column(0, "x")
    assert array.rows[0] == [T(""), T("1"), T("2"), T("3")]
    array.insert_row(1)
    assert array.rows[1] == [T("")] * 4

    with pytest.raises(dyncsv.InvalidColumn):
        array.insert_column(9, "y")
    with pytest.raises(dyncsv.InvalidColumn):
        array.insert_row(9)
    with pytest.raises(dyncsv.InvalidRowData):
        array.insert_row(0, [T("1")])


def test_move_column_carries_cells():
    array = make_array()
    array.move_column(0, 2)
    assert [c.name for c in array.columns] == ["b", "c", "a"]
    assert str(array) == "b,c,a\n2,3,1\n5,6,4"
    with pytest.raises(dyncsv.OutOfRangeError):
        array.move_column(0, 3)


def test_move_row_walks_by_swaps():
    array = make_array(names=("id",), rows=[(str(i),) for i in range(4)])
    array.move_row(3, 0)
    assert [str(r[0]) for r in array.rows] == ["3", "0", "1", "2"]


def test_delete_row_and_column():
    array = make_array()
    assert array.delete_row(5) is False
    assert array.delete_row(1) is True
    array.delete_column(0)
    assert str(array) == "b,c\n2,3"
    with pytest.raises(dyncsv.OutOfRangeError):
        array.delete_column(2)

    array.delete_column(0)
    array.delete_column(0)
    assert array.get_row_count() == 0


def test_cells_rows_and_columns():
    array = make_array()
    assert array.get_cell(0, 1) == T("2")
    assert array.get_cell(0, 3) is None
    array.set_cell(0, 1, T("20"))
    with pytest.raises(dyncsv.OutOfRangeError):
        array.set_cell(2, 0, T("x"))

    array.set_row(1, [T("7"), T("8"), T("9")])
    array.edit_row(0, [T("0"), None, None])
    array.set_column(2, T("z"))
    assert str(array) == "a,b,c\n0,20,z\n7,8,z"
    with pytest.raises(dyncsv.InsufficientRowData):
        array.set_row(0, [T("1")])
    with pytest.raises(dyncsv.OutOfRangeError):
        array.rename_column(3, "q")


def test_width_tracking_and_table():
    array = make_array(names=("k",), rows=(("long",), ("ab",)))
    assert array.get_string_table(CellAlignType.RIGHT) == [["   k"], ["long"], ["  ab"]]
    array.delete_row(0)
    assert array.metas[0].max_unicode_width == 2
    assert array.get_formatted_string("\n", CellAlignType.LEFT) == "k \nab"


def test_apply_all():
    array = make_array()
    array.apply_all(lambda v: T(str(v) + "!"))
    assert list(map(str, array.get_column_iterator(0))) == ["1!", "4!"]
    assert array.metas[0].max_unicode_width == 2
