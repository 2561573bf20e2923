import pytest

from lark.exceptions import UnexpectedInput

from .context import (
    CommandFrontEnd,
    Program,
    CreateStmnt,
    DropStmnt,
    InsertStmnt,
    DeleteStmnt,
    SelectStmnt,
    KeyEquals,
    KeyRange,
    RangePolicy,
)


@pytest.fixture(scope="module")
def frontend():
    return CommandFrontEnd()


def parse_one(frontend, text):
    frontend.parse(text)
    assert frontend.is_success(), frontend.error_summary()
    program = frontend.get_parsed()
    assert isinstance(program, Program)
    assert len(program.statements) == 1
    return program.statements[0]


def test_create_stmnt(frontend):
    assert parse_one(frontend, "create tree foo") == CreateStmnt("foo", None)
    assert parse_one(frontend, "CREATE TREE foo BRANCHING 4") == CreateStmnt("foo", 4)


def test_drop_stmnt(frontend):
    assert parse_one(frontend, "drop tree foo_2") == DropStmnt("foo_2")


def test_insert_stmnt_literals(frontend):
    assert parse_one(frontend, "insert into foo values (1, 'apple')") == InsertStmnt("foo", 1, "apple")
    assert parse_one(frontend, 'insert into foo values (-3, "pear")') == InsertStmnt("foo", -3, "pear")
    assert parse_one(frontend, "insert into foo values (2.5, 10)") == InsertStmnt("foo", 2.5, 10)
    assert parse_one(frontend, "insert into foo values ('k', null)") == InsertStmnt("foo", "k", None)


def test_delete_stmnt(frontend):
    assert parse_one(frontend, "delete from foo where key = 3") == DeleteStmnt("foo", 3)


def test_select_stmnt(frontend):
    assert parse_one(frontend, "select from foo") == SelectStmnt("foo", None)
    assert parse_one(frontend, "select from foo where key = 'x'") == SelectStmnt("foo", KeyEquals("x"))


def test_select_between(frontend):
    stmnt = parse_one(frontend, "select from foo where key between 3 and 7")
    assert stmnt.where_clause == KeyRange(3, RangePolicy.Inclusive, 7, RangePolicy.Inclusive)


@pytest.mark.parametrize("lower_op,upper_op,low_policy,high_policy", [
    (">", "<", RangePolicy.Exclusive, RangePolicy.Exclusive),
    (">=", "<", RangePolicy.Inclusive, RangePolicy.Exclusive),
    (">", "<=", RangePolicy.Exclusive, RangePolicy.Inclusive),
    (">=", "<=", RangePolicy.Inclusive, RangePolicy.Inclusive),
])
def test_select_range_policies(frontend, lower_op, upper_op, low_policy, high_policy):
    stmnt = parse_one(frontend, f"select from foo where key {lower_op} 3 and key {upper_op} 7")
    assert stmnt.where_clause == KeyRange(3, low_policy, 7, high_policy)


def test_multi_stmnt(frontend):
    frontend.parse("create tree foo; insert into foo values (1, 'a'); select from foo;")
    assert frontend.is_success(), frontend.error_summary()
    statements = frontend.get_parsed().statements
    assert [type(stmnt) for stmnt in statements] == [CreateStmnt, InsertStmnt, SelectStmnt]


@pytest.mark.parametrize("text", [
    "create tree",
    "create table foo",
    "insert into foo values (1)",
    "select from foo where key > 3",
    "delete from foo",
    "",
])
def test_invalid_input(frontend, text):
    frontend.parse(text)
    assert not frontend.is_success()
    assert frontend.get_parsed() is None
    assert frontend.error_summary()


def test_raise_exception():
    frontend = CommandFrontEnd(raise_exception=True)
    with pytest.raises(UnexpectedInput):
        frontend.parse("drop foo")
