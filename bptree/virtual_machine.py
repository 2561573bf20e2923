from __future__ import annotations
import logging

from .btree import BPlusTree, InvalidConfigurationError
from .dataexchange import Response
from .pipe import Pipe
from .statemanager import StateManager
from .lang_parser.visitor import Visitor
from .lang_parser.symbols import (
    Symbol,
    Program,
    CreateStmnt,
    DropStmnt,
    InsertStmnt,
    DeleteStmnt,
    SelectStmnt,
    KeyEquals,
    KeyRange,
)


logger = logging.getLogger(__name__)


# section: exceptions


class NameResolutionError(Exception):
    """
    Unable to resolve name
    """
    pass


class ExecutionException(Exception):
    """
    Some error while VM was running
    """
    pass


class VirtualMachine(Visitor):
    """
    Executes parsed statements against the trees held by the state manager.
    Rows produced by select are written to the output pipe as (key, value) tuples.
    """

    def __init__(self, state_manager: StateManager, output_pipe: Pipe):
        self.state_manager = state_manager
        self.output_pipe = output_pipe

    def run(self, program: Program) -> Response:
        """
        run the virtual machine with program on state;
        stops at the first failing statement
        :param program:
        :return: response of the last statement
        """
        resp = Response(True)
        for stmnt in program.statements:
            try:
                resp = self.execute(stmnt)
            except (ExecutionException, NameResolutionError, TypeError) as e:
                # TypeError: key is not comparable with the keys already in the tree
                logger.error(f"ERROR: virtual machine failed on: [{stmnt}] with [{e}]")
                return Response(False, error_message=str(e))
            if not resp.success:
                logger.error(f"ERROR: virtual machine failed on: [{stmnt}] with [{resp.error_message}]")
                return resp
        return resp

    def execute(self, stmnt: Symbol) -> Response:
        """
        execute statement
        :param stmnt:
        :return:
        """
        return stmnt.accept(self)

    # section : helpers

    def resolve_tree(self, tree_name: str) -> BPlusTree:
        if not self.state_manager.tree_exists(tree_name):
            raise NameResolutionError(f"tree [{tree_name}] does not exist")
        return self.state_manager.get_tree(tree_name)

    @staticmethod
    def check_key(key):
        if key is None:
            raise ExecutionException("null is not a valid key")

    # section : top-level handlers

    def visit_program(self, program: Program) -> Response:
        return self.run(program)

    def visit_create_stmnt(self, stmnt: CreateStmnt) -> Response:
        if self.state_manager.tree_exists(stmnt.tree_name):
            return Response(False, error_message=f"tree [{stmnt.tree_name}] exists")
        try:
            self.state_manager.create_tree(stmnt.tree_name, stmnt.branching_factor)
        except InvalidConfigurationError as e:
            return Response(False, error_message=f"tree creation failed due to [{e}]")
        return Response(True)

    def visit_drop_stmnt(self, stmnt: DropStmnt) -> Response:
        self.resolve_tree(stmnt.tree_name)
        self.state_manager.drop_tree(stmnt.tree_name)
        return Response(True)

    def visit_insert_stmnt(self, stmnt: InsertStmnt) -> Response:
        tree = self.resolve_tree(stmnt.tree_name)
        self.check_key(stmnt.key)
        tree.insert(stmnt.key, stmnt.value)
        return Response(True)

    def visit_delete_stmnt(self, stmnt: DeleteStmnt) -> Response:
        """
        delete a single key; deleting an absent key succeeds
        """
        tree = self.resolve_tree(stmnt.tree_name)
        self.check_key(stmnt.key)
        tree.delete(stmnt.key)
        return Response(True)

    def visit_select_stmnt(self, stmnt: SelectStmnt) -> Response:
        """
        write matching rows to output pipe
        """
        tree = self.resolve_tree(stmnt.tree_name)
        condition = stmnt.where_clause

        if condition is None:
            rows = tree.items()
        elif isinstance(condition, KeyEquals):
            self.check_key(condition.key)
            rows = [(condition.key, tree[condition.key])] if condition.key in tree else []
        elif isinstance(condition, KeyRange):
            self.check_key(condition.key_low)
            self.check_key(condition.key_high)
            rows = tree.items_range(
                condition.key_low, condition.key_high, condition.low_policy, condition.high_policy)
        else:
            raise ExecutionException(f"Unknown where clause [{condition}]")

        count = 0
        for row in rows:
            self.output_pipe.write(row)
            count += 1
        return Response(True, body=count)
