from .btree import (
    BPlusTree,
    RangePolicy,
    InvalidConfigurationError,
    TreeValidationError,
)
from .interface import TreeShell, parse_args_and_start, repl, run_file, run_stress
