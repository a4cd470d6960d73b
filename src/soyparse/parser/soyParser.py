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

import logging
import typing
from typing import Optional, Union

from pe.operators import Choice as Ch
from pe.operators import Plus, Regex
from pe.operators import Sequence as Seq

from soyparse import const
from soyparse.ast import Mark
from soyparse.ast.body import Attribute
from soyparse.ast.declarations import DelTemplate, Program, Template
from soyparse.parser.combinators import EOF, RULES
from soyparse.parser.declarations import DELTEMPLATE, NAMESPACE_CMD, TEMPLATE

LOGGER = logging.getLogger(__name__)

# whitespace, `// line` and `/* block */` comments. `/**` starts a doc block and is not skipped.
IGNORED = Regex(r"(?:[ \t\r\n]|//[^\n]*|/\*(?!\*[^/])[\s\S]*?\*/)*")


def make_program(
    mark: Mark,
    namespace: tuple[tuple[str, ...], tuple[Attribute, ...]],
    *templates: Union[Template, DelTemplate],
) -> Program:
    path, attributes = namespace
    return Program(mark, path, templates, attributes)


PROGRAM = RULES.node(
    "program",
    make_program,
    IGNORED,
    Ch(NAMESPACE_CMD, RULES.error("program_namespace", "'{namespace'")),
    Plus(Seq(IGNORED, Ch(TEMPLATE, DELTEMPLATE))),
    IGNORED,
    Ch(EOF, RULES.error("program_end", "'{template'", "'{deltemplate'")),
)


def parse(source: str, filename: str = const.DEFAULT_FILENAME, max_depth: Optional[int] = None) -> Program:
    """
    Parse a template file.

    :param source: the content of the file
    :param filename: the name used in error messages
    :param max_depth: maximum nesting of blocks and expressions, the parser.max_nesting_depth option when not set
    :raises ParserException: the input is not valid, no partial result is produced
    """
    LOGGER.debug("Parsing %s (%d characters)", filename, len(source))
    program = typing.cast(Program, RULES.parse("program", source, filename, max_depth))
    LOGGER.debug("Parsed %s: namespace %s, %d templates", filename, ".".join(program.namespace), len(program.templates))
    return program


def parse_file(filename: str, max_depth: Optional[int] = None) -> Program:
    with open(filename, encoding="utf-8") as fh:
        source = fh.read()
    return parse(source, filename, max_depth)
