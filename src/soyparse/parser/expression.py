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

import re
from enum import Enum
from typing import Optional

from pe.operators import And
from pe.operators import Capture as Cap
from pe.operators import Choice as Ch
from pe.operators import Literal as Lit
from pe.operators import Nonterminal as NT
from pe.operators import Not
from pe.operators import Optional as Opt
from pe.operators import Regex
from pe.operators import Sequence as Seq
from pe.operators import Star

from soyparse.ast import Mark
from soyparse.ast.expressions import (
    BooleanLiteral,
    Expression,
    FunctionCall,
    MapItem,
    MapLiteral,
    NumberLiteral,
    OtherExpression,
    Reference,
    StringLiteral,
    Ternary,
)
from soyparse.parser import GrammarError
from soyparse.parser.combinators import IDENT_CHAR, IDENTIFIER, OPT_WS, RULES, WS, spaced, until

ESCAPES: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

ESCAPE_SEQUENCE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)


def unescape(value: str) -> str:
    """
    Decode the backslash escapes of a string literal. Unknown escapes yield the escaped character.
    """

    def replace(match: "re.Match[str]") -> str:
        escaped = match.group(1)
        if len(escaped) == 5:
            return chr(int(escaped[1:], 16))
        return ESCAPES.get(escaped, escaped)

    return ESCAPE_SEQUENCE.sub(replace, value)


QUESTION = Seq(WS, Lit("?"), WS)
COLON = Seq(WS, Lit(":"), WS)

PRIMARY = NT("primary")

STRING_PATTERN = r"(?:[^'\\]|\\[\s\S])*"

# Parts of an unparsed expression that are skipped as a whole: the terminator is not looked for inside them
RAW_ATOM = RULES.define(
    "raw_atom",
    Ch(
        Regex("'%s'" % STRING_PATTERN),
        Seq(Lit("("), until(")", atom=NT("raw_atom"), capture=False)),
        Seq(Lit("["), until("]", atom=NT("raw_atom"), capture=False)),
    ),
)


class TernaryState(Enum):
    start = 1
    have_condition = 2
    have_true_branch = 3


def fold_ternary(mark: Mark, *operands: Expression) -> Expression:
    """
    Fold the operands of an expression: a single operand is returned as is, three operands are the condition and the
    branches of a ternary.
    """
    phase = TernaryState.start
    cond: Optional[Expression] = None
    left: Optional[Expression] = None
    for operand in operands:
        if phase is TernaryState.start:
            cond, phase = operand, TernaryState.have_condition
        elif phase is TernaryState.have_condition:
            left, phase = operand, TernaryState.have_true_branch
        else:
            assert cond is not None and left is not None
            return Ternary(mark, cond, left, operand)
    if phase is TernaryState.have_condition:
        assert cond is not None
        return cond
    raise GrammarError("ternary operator with %d operands" % len(operands))


def expression(name: str, terminator: object) -> object:
    """
    An expression that stops right before optional whitespace followed by the terminator. Neither is consumed.

    The condition and the true branch of a ternary are operands: a reference, string, boolean, map, number or function
    call. The false branch is a full expression, so ternaries nest to the right. `?` and `:` need whitespace on both
    sides.

    Input that is not an operand or a ternary is kept verbatim, up to the terminator, as a single OtherExpression. The
    text may be empty. This fallback is what keeps unsupported syntax parseable. An operand followed by `?` always
    starts a ternary, so `$a ? $b` without a false branch does not match.
    """
    end = Seq(OPT_WS, terminator)
    ternary = RULES.node(
        name + "_ternary",
        fold_ternary,
        PRIMARY,
        Opt(Seq(QUESTION, PRIMARY, COLON, NT(name))),
        And(end),
    )
    other = RULES.node(
        name + "_other",
        OtherExpression,
        Not(Seq(PRIMARY, QUESTION)),
        until(end, consume=False, atom=RAW_ATOM),
    )
    return RULES.define(name, Ch(ternary, other))


REFERENCE = RULES.node("reference", Reference, Lit("$"), IDENTIFIER)

STRING_LITERAL = RULES.node(
    "string_literal",
    lambda mark, value: StringLiteral(mark, unescape(value)),
    Lit("'"),
    Cap(Regex(STRING_PATTERN)),
    Lit("'"),
)

BOOLEAN_LITERAL = RULES.node(
    "boolean_literal",
    lambda mark, word: BooleanLiteral(mark, word == "true"),
    Cap(Ch(Lit("true"), Lit("false"))),
    Not(IDENT_CHAR),
)

MAP_VALUE = expression("map_value", Ch(Lit(","), Lit("]")))

MAP_ITEM = RULES.node("map_item", MapItem, STRING_LITERAL, OPT_WS, Lit(":"), OPT_WS, MAP_VALUE)

MAP_LITERAL = RULES.node(
    "map_literal",
    lambda mark, *items: MapLiteral(mark, items),
    Lit("["),
    OPT_WS,
    Ch(
        Lit("]"),
        Seq(spaced(MAP_ITEM), Star(Seq(Lit(","), spaced(MAP_ITEM))), Opt(Lit(",")), OPT_WS, Lit("]")),
    ),
)

# `1.2.3` is not a number, it is left to the fallback
NUMBER_LITERAL = RULES.node(
    "number_literal",
    lambda mark, text: NumberLiteral(mark, float(text)),
    Cap(Regex(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")),
    Not(Regex(r"[0-9.]")),
)

ARGUMENT = expression("argument", Ch(Lit(","), Lit(")")))

FUNCTION_CALL = RULES.node(
    "function_call",
    lambda mark, name, *args: FunctionCall(mark, name, args),
    IDENTIFIER,
    Lit("("),
    Ch(
        Seq(OPT_WS, Lit(")")),
        Seq(spaced(ARGUMENT), Star(Seq(Lit(","), spaced(ARGUMENT))), Lit(")")),
    ),
)

RULES.define("primary", Ch(REFERENCE, STRING_LITERAL, BOOLEAN_LITERAL, MAP_LITERAL, NUMBER_LITERAL, FUNCTION_CALL))
