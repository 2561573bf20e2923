from __future__ import annotations
import logging

from lark import Lark
from lark.exceptions import UnexpectedInput  # root of all lark exceptions

from .symbols import ToAst, Program
from .grammar import GRAMMAR


logger = logging.getLogger(__name__)


class CommandFrontEnd:
    """
    Parser for the tree command language, based on lark definition
    """
    def __init__(self, raise_exception=False):
        self.parser = None
        self.parsed = None  # parsed AST
        self.exc = None  # exception
        self.is_succ = False
        self.raise_exception = raise_exception
        self._init()

    def _init(self):
        self.parser = Lark(GRAMMAR, parser='earley', start="program")

    def error_summary(self):
        if self.exc is not None:
            return str(self.exc)

    def is_success(self):
        """
        whether parse operation is success
        :return:
        """
        return self.is_succ

    def get_parsed(self) -> Program:
        return self.parsed

    def parse(self, text: str):
        """
        parse `text` into a Program; on failure, the error is
        recorded and raised only if raise_exception is set

        :param text:
        :return:
        """
        try:
            tree = self.parser.parse(text)
            logger.debug(f"untransformed AST:\n{tree.pretty()}")
            transformer = ToAst()
            self.parsed = transformer.transform(tree)
            self.is_succ = True
            self.exc = None
        except UnexpectedInput as e:
            self.exc = e
            self.parsed = None
            self.is_succ = False
            if self.raise_exception:
                raise
