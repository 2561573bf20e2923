from __future__ import annotations
"""
Contains symbol classes used by parser, and the transformer
that converts a lark parse tree into them
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from lark import Transformer, Token

from ..btree import RangePolicy
from .visitor import Visitor


@dataclass
class Symbol:
    """
    Symbol is the root of parser hierarchy; Symbols compose the parser's output, i.e. the AST
    """
    def accept(self, visitor: Visitor) -> Any:
        return visitor.visit(self)


@dataclass
class Program(Symbol):
    statements: List[Union[CreateStmnt, DropStmnt, InsertStmnt, DeleteStmnt, SelectStmnt]]


@dataclass
class CreateStmnt(Symbol):
    tree_name: str
    # None means the tree default
    branching_factor: Optional[int] = None


@dataclass
class DropStmnt(Symbol):
    tree_name: str


@dataclass
class InsertStmnt(Symbol):
    tree_name: str
    key: Any
    value: Any


@dataclass
class DeleteStmnt(Symbol):
    tree_name: str
    key: Any


@dataclass
class KeyEquals(Symbol):
    key: Any


@dataclass
class KeyRange(Symbol):
    key_low: Any
    low_policy: RangePolicy
    key_high: Any
    high_policy: RangePolicy


@dataclass
class SelectStmnt(Symbol):
    tree_name: str
    # no where clause means a full scan
    where_clause: Optional[Union[KeyEquals, KeyRange]] = None


class ToAst(Transformer):
    """
    Convert parse tree to AST.

    Each handler receives the transformed children of the rule it is
    named after; anonymous tokens, e.g. keywords, are already filtered out.
    """

    def program(self, args):
        return Program(list(args))

    def create_stmnt(self, args):
        tree_name = args[0]
        branching_factor = args[1] if len(args) > 1 else None
        return CreateStmnt(tree_name, branching_factor)

    def branching_clause(self, args):
        return int(args[0])

    def drop_stmnt(self, args):
        return DropStmnt(args[0])

    def insert_stmnt(self, args):
        tree_name, key, value = args
        return InsertStmnt(tree_name, key, value)

    def delete_stmnt(self, args):
        tree_name, condition = args
        return DeleteStmnt(tree_name, condition.key)

    def select_stmnt(self, args):
        tree_name = args[0]
        where_clause = args[1] if len(args) > 1 else None
        return SelectStmnt(tree_name, where_clause)

    def key_equals(self, args):
        return KeyEquals(args[0])

    def key_between(self, args):
        key_low, key_high = args
        return KeyRange(key_low, RangePolicy.Inclusive, key_high, RangePolicy.Inclusive)

    def key_range(self, args):
        lower_op, key_low, upper_op, key_high = args
        low_policy = RangePolicy.Inclusive if lower_op == ">=" else RangePolicy.Exclusive
        high_policy = RangePolicy.Inclusive if upper_op == "<=" else RangePolicy.Exclusive
        return KeyRange(key_low, low_policy, key_high, high_policy)

    def tree_name(self, args):
        return str(args[0])

    # literals

    def integer(self, args):
        return int(args[0])

    def real(self, args):
        return float(args[0])

    def string(self, args):
        token: Token = args[0]
        # strip quotes
        return str(token)[1:-1]

    def null(self, args):
        return None
