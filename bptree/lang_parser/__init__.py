from .handler import CommandFrontEnd
from .symbols import (
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
from .visitor import Visitor, HandlerNotFoundException
