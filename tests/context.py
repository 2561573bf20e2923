"""
This sets up the modules for testing
"""
import os
import sys
# otherwise everything that needs to be tested will have to be explicitly imported
# which would make the top level export expose items that aren't intended for user access
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


# specific internal imports for specific tests suites
# generally we'll import entire module, unless it' clearer to import a specific member

from bptree.btree import (
    BPlusTree,
    LeafNode,
    InternalNode,
    RangePolicy,
    InvalidConfigurationError,
    TreeValidationError,
    NOT_FOUND,
)
from bptree.interface import TreeShell, run_file
from bptree.lang_parser.handler import CommandFrontEnd
from bptree.lang_parser.symbols import (
    Program,
    CreateStmnt,
    DropStmnt,
    InsertStmnt,
    DeleteStmnt,
    SelectStmnt,
    KeyEquals,
    KeyRange,
)
from bptree.stress import run_add_del_stress_test, run_add_del_stress_suite, run_random_stress_test
