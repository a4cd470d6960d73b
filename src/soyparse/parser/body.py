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

from collections import abc
from typing import Callable

from pe.operators import Capture as Cap
from pe.operators import Choice as Ch
from pe.operators import Literal as Lit
from pe.operators import Nonterminal as NT
from pe.operators import Not
from pe.operators import Regex
from pe.operators import Sequence as Seq
from pe.operators import Star

from soyparse import const
from soyparse.ast.body import Call, Interpolation, LetStatement, OtherCmd, Param, TextNode
from soyparse.parser import UnterminatedBlockException
from soyparse.parser.combinators import (
    EOF,
    IDENTIFIER,
    OPT_WS,
    RULES,
    WS,
    close_cmd,
    current_file,
    mark,
    open_cmd,
    position,
    until,
)
from soyparse.parser.expression import expression
from soyparse.parser.tokens import ATTRIBUTES, TEMPLATE_NAME

BODY_NODE = NT("body_node")

TEXT = RULES.node("text", TextNode, Cap(Regex(r"[^{}]+")))

KEYWORD = Regex(r"(?:%s)(?![A-Za-z0-9_])" % "|".join(const.COMMAND_KEYWORDS))

# `{...}` that is neither a closing tag nor a command, kept verbatim
INTERPOLATION = RULES.node("interpolation", Interpolation, Lit("{"), Not(Ch(Lit("/"), KEYWORD)), until("}"))

UNTERMINATED = object()

END_OF_INPUT = RULES.define("end_of_input", EOF, lambda s, pos, end, args: UNTERMINATED)


def block(
    name: str, command: str, head: object, build: Callable[..., object], interior: abc.Sequence[str] = ()
) -> object:
    """
    A command with a body: the head, then body nodes up to the closing tag `{/command}`.
    The value is `build(mark, *values of the head, *body nodes)`.

    Interior commands (e.g. `{else}` in an `{if}`) are matched and dropped, so all arms of the block end up in one
    flat body.

    :raises UnterminatedBlockException: the input ends before the closing tag, located at the start of the head
    :raises ParserException: something else than a body node or the closing tag follows the body
    """

    def act(s: str, pos: int, end: int, args: list[object]) -> object:
        if args and args[-1] is UNTERMINATED:
            raise UnterminatedBlockException(position(pos), command, current_file())
        return build(mark(pos, end), *args)

    content = Ch(TEXT, *(open_cmd(cmd) for cmd in interior), BODY_NODE)
    close = Ch(close_cmd(command), END_OF_INPUT, RULES.error(name + "_close", "'{/%s}'" % command))
    return RULES.define(name, Seq(head, Star(content), close), act)


def other_cmd(command: str, interior: abc.Sequence[str]) -> object:
    """A generic wrapper block, e.g. `{if ...}...{/if}`"""
    return block(
        command + "_block",
        command,
        open_cmd(command),
        lambda mark, *body: OtherCmd(mark, command, body),
        interior,
    )


INLINE_VALUE = expression("inline_value", Lit("/}"))


def binding(keyword: str, target: object, node: Callable[..., object]) -> object:
    """
    A named value, either `{keyword name: expression /}` or `{keyword name attributes}body{/keyword}`.
    """
    inline = RULES.node(
        keyword + "_inline",
        node,
        Lit("{" + keyword),
        WS,
        target,
        OPT_WS,
        Lit(":"),
        OPT_WS,
        INLINE_VALUE,
        OPT_WS,
        Lit("/}"),
    )
    with_body = block(
        keyword + "_block",
        keyword,
        Seq(Lit("{" + keyword), WS, target, ATTRIBUTES, OPT_WS, Lit("}")),
        lambda mark, name, attributes, *body: node(mark, name, body, attributes=attributes),
    )
    return RULES.define(keyword, Ch(inline, with_body))


PARAM = binding("param", IDENTIFIER, Param)

LET = binding("let", Seq(Lit("$"), IDENTIFIER), LetStatement)


def call(keyword: str, delegate: bool) -> object:
    """
    `{call name attributes /}` or `{call name attributes}` params `{/call}`
    """
    return RULES.node(
        keyword,
        lambda mark, template_name, attributes, *params: Call(mark, template_name, params, attributes, delegate),
        Lit("{" + keyword),
        WS,
        TEMPLATE_NAME,
        ATTRIBUTES,
        OPT_WS,
        Ch(
            Lit("/}"),
            Seq(
                Lit("}"),
                OPT_WS,
                Star(Seq(PARAM, OPT_WS)),
                Ch(close_cmd(keyword), RULES.error(keyword + "_close", "'{/%s}'" % keyword, "'{param'")),
            ),
        ),
    )


CALL = call("call", delegate=False)
DELCALL = call("delcall", delegate=True)

WRAPPERS: dict[str, object] = {name: other_cmd(name, interior) for name, interior in const.WRAPPER_COMMANDS.items()}

RULES.define("body_node", Ch(CALL, DELCALL, LET, *WRAPPERS.values(), INTERPOLATION))
