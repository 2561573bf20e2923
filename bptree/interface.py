from __future__ import annotations
"""
This module contains the highest level user-interaction and resource allocation
i.e. management of entities, like parser, virtual machine, state manager, etc.
"""
import os
import os.path
import sys
import logging

from typing import List

from .constants import USAGE, PROMPT, EXIT_SUCCESS
from .dataexchange import Response, MetaCommandResult
from .lang_parser.handler import CommandFrontEnd
from .lang_parser.symbols import Program
from .pipe import Pipe
from .statemanager import StateManager
from .stress import run_add_del_stress_suite
from .virtual_machine import VirtualMachine


# section: core execution/user-interface logic

def config_logging(level=logging.INFO):
    # config logger
    FORMAT = "[%(filename)s:%(lineno)s - %(funcName)s ] %(message)s"
    # log to stdout
    logging.basicConfig(format=FORMAT, level=level)


class TreeShell:
    """
    This provides programmatic interface for interacting with trees.

    An example flow is like:
    ```
    # create handler instance
    shell = TreeShell()

    # submit statement
    resp = shell.handle_input("create tree foo branching 4; insert into foo values (1, 'a')")
    assert resp.success

    # below are only needed to read results of statements that produce output
    resp = shell.handle_input("select from foo")
    pipe = shell.get_pipe()

    # print rows
    while pipe.has_msgs():
        print(pipe.read())
    ```
    """

    def __init__(self):
        self.pipe = None
        self.state_manager = None
        self.virtual_machine = None
        self.frontend = None
        self.configure()
        self.reset()

    def reset(self):
        """
        Reset state. Recreates pipe, state manager and virtual_machine.
        """
        self.pipe = Pipe()
        self.state_manager = StateManager()
        self.virtual_machine = VirtualMachine(self.state_manager, self.pipe)

    def configure(self):
        """
        Handle any configuration tasks
        """
        config_logging()
        # grammar compilation is relatively expensive; build the parser once
        self.frontend = CommandFrontEnd()

    def nuke(self):
        """
        drop every tree.
        This effectively restarts the instance into a clean state.
        """
        self.reset()

    def get_pipe(self) -> Pipe:
        """
        NOTE: get pipe; pipes are recycled if TreeShell.reset is invoked
        :return:
        """
        return self.pipe

    def close(self):
        self.state_manager.reset()

    def handle_input(self, input_buffer: str) -> Response:
        """
        handle input- parse and execute

        :param input_buffer:
        :return:
        """
        return self.input_handler(input_buffer)

    @staticmethod
    def is_meta_command(command: str) -> bool:
        return bool(command) and command[0] == '.'

    def do_meta_command(self, command: str) -> Response:
        """
        handle execution of meta command
        :param command:
        :return:
        """
        if command == ".quit":
            print("goodbye")
            self.close()
            sys.exit(EXIT_SUCCESS)
        elif command.startswith(".btree"):
            # .btree expects tree-name
            splits = command.split()
            if len(splits) != 2 or not self.state_manager.tree_exists(splits[1]):
                print("Invalid argument to .btree| Usage: > .btree <tree-name>")
                return Response(False, status=MetaCommandResult.InvalidArgument)
            tree_name = splits[1]
            print("Printing tree" + "-"*50)
            self.state_manager.print_tree(tree_name)
            print("Finished printing tree" + "-"*50)
            return Response(True, status=MetaCommandResult.Success)
        elif command.startswith(".validate"):
            splits = command.split()
            if len(splits) != 2 or not self.state_manager.tree_exists(splits[1]):
                print("Invalid argument to .validate| Usage: > .validate <tree-name>")
                return Response(False, status=MetaCommandResult.InvalidArgument)
            tree_name = splits[1]
            print("Validating tree....")
            self.state_manager.validate_tree(tree_name)
            print("Validation succeeded.......")
            return Response(True, status=MetaCommandResult.Success)
        elif command == ".nuke":
            self.nuke()
            return Response(True, status=MetaCommandResult.Success)
        elif command == ".help":
            print(USAGE)
            return Response(True, status=MetaCommandResult.Success)
        return Response(False, status=MetaCommandResult.UnrecognizedCommand)

    def prepare_statement(self, command: str) -> Response:
        """
        prepare statement, i.e. parse statement and
        return it's AST.

        :param command:
        :return:
        """
        self.frontend.parse(command)
        if not self.frontend.is_success():
            return Response(False, error_message=f"parse failed due to: [{self.frontend.error_summary()}]")
        return Response(True, body=self.frontend.get_parsed())

    def execute_statement(self, program: Program) -> Response:
        """
        execute statement;
        returns return value of child-invocation
        """
        return self.virtual_machine.run(program)

    def input_handler(self, input_buffer: str) -> Response:
        """
        receive input, parse input, and execute vm.

        :param input_buffer:
        :return:
        """
        input_buffer = input_buffer.strip()
        if self.is_meta_command(input_buffer):
            m_resp = self.do_meta_command(input_buffer)
            if m_resp.success:
                return Response(True, status=MetaCommandResult.Success)

            print("Unable to process meta command")
            return Response(False, status=m_resp.status, error_message=f"meta command [{input_buffer}] failed")

        p_resp = self.prepare_statement(input_buffer)
        if not p_resp.success:
            return Response(False, error_message=p_resp.error_message)

        program = p_resp.body
        e_resp = self.execute_statement(program)
        if e_resp.success:
            logging.info(f"Execution of command '{input_buffer}' succeeded")
            return Response(True, body=e_resp.body)
        else:
            logging.info(f"Execution of command '{input_buffer}' failed")
            return Response(False, error_message=e_resp.error_message)


def repl():
    """
    REPL (read-eval-print loop) for trees
    """
    shell = TreeShell()

    print("Welcome to bptree")
    print("For help use .help")
    while True:
        input_buffer = input(PROMPT)
        resp = shell.handle_input(input_buffer)
        if not resp.success:
            print(f"Command execution failed due to [{resp.error_message}] ")
            continue

        # get output pipe
        pipe = shell.get_pipe()

        while pipe.has_msgs():
            print(pipe.read())


def run_file(input_filepath: str) -> Response:
    """
    Execute statements in file.
    """
    if not os.path.exists(input_filepath):
        return Response(False, error_message=f"Argument file [{input_filepath}] not found")

    shell = TreeShell()

    with open(input_filepath) as fp:
        contents = fp.read()

    resp = shell.handle_input(contents)
    if not resp.success:
        print(f"Command execution failed due to [{resp.error_message}] ")

    # get output pipe
    pipe = shell.get_pipe()

    while pipe.has_msgs():
        print(pipe.read())

    shell.close()
    return resp


def run_stress():
    """
    Run stress test
    """
    shell = TreeShell()
    run_add_del_stress_suite(shell)
    print("Stress suite succeeded")


def parse_args_and_start(args: List):
    """
    parse args and starts
    :return:
    """
    args_description = """Usage:
python run.py repl
    // start repl
python run.py file <filepath>
    // read file at <filepath>
python run.py stress
    // run add/delete stress suite
    """
    if len(args) < 1:
        print("Error: run-mode not specified")
        print(args_description)
        return

    runmode = args[0].lower()
    if runmode == "repl":
        repl()
    elif runmode == "stress":
        run_stress()
    elif runmode == "file":
        if len(args) < 2:
            print("Error: Expected input filepath")
            print(args_description)
            return
        input_filepath = args[1]
        run_file(input_filepath)
    else:
        print(f"Error: Invalid run mode [{runmode}]")
        print(args_description)
        return
