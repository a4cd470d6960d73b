"""
    Copyright 2025 Inmanta

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at

        http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.

    Contact: code@inmanta.com
"""

import argparse
import dataclasses
from collections import abc
from typing import Callable, Optional

FunctionType = Callable[[argparse.Namespace], None]
ParserConfigType = Callable[[argparse.ArgumentParser, abc.Sequence[argparse.ArgumentParser]], None]


class CLIException(Exception):
    """
    Ends the command line tool with the given exit code, the message is printed on stderr.
    """

    def __init__(self, *args: str, exitcode: int) -> None:
        self.exitcode = exitcode
        super().__init__(*args)


class ShowUsageException(Exception):
    """
    Raise this exception to show the usage message of the given level
    """


@dataclasses.dataclass(frozen=True)
class Command:
    """
    A subcommand of the command line tool.

    :param parser_config: adds the arguments of the command to its subparser
    :param add_verbose_flag: accept `-v` after the command name as well
    """

    name: str
    function: FunctionType
    help: str
    parser_config: Optional[ParserConfigType] = None
    add_verbose_flag: bool = True

    def add_parser(
        self, subparsers: "argparse._SubParsersAction[argparse.ArgumentParser]", verbosity: argparse.ArgumentParser
    ) -> None:
        parents: list[argparse.ArgumentParser] = [verbosity] if self.add_verbose_flag else []
        parser = subparsers.add_parser(self.name, help=self.help, parents=parents)
        if self.parser_config is not None:
            self.parser_config(parser, parents)
        parser.set_defaults(func=self.function)


class Commander:
    """
    The registered commands, in registration order
    """

    __commands: dict[str, Command] = {}

    @classmethod
    def add(cls, cmd: Command) -> None:
        if cmd.name in cls.__commands:
            raise Exception("Command %s already registered" % cmd.name)
        cls.__commands[cmd.name] = cmd

    @classmethod
    def commands(cls) -> dict[str, Command]:
        return cls.__commands


def command(
    name: str, help_msg: str, parser_config: Optional[ParserConfigType] = None, add_verbose_flag: bool = True
) -> Callable[[FunctionType], FunctionType]:
    """
    A decorator that registers a function as a command
    """

    def register(function: FunctionType) -> FunctionType:
        Commander.add(Command(name, function, help_msg, parser_config, add_verbose_flag))
        return function

    return register
