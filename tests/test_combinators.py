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

import pytest
from pe.operators import Capture as Cap
from pe.operators import Choice as Ch
from pe.operators import Literal as Lit
from pe.operators import Nonterminal as NT
from pe.operators import Regex
from pe.operators import Sequence as Seq
from pe.operators import Star

from soyparse.ast import Position
from soyparse.parser import GrammarError, NestingTooDeepException, ParserException
from soyparse.parser.combinators import (
    IDENTIFIER,
    OPT_WS,
    RULES,
    PositionTracker,
    close_cmd,
    open_cmd,
    spaced,
    until,
)

NAME = RULES.define("combinators_name", IDENTIFIER)

MARKED = RULES.define(
    "combinators_marked",
    Seq(Lit("\n "), RULES.node("combinators_marked_name", lambda mark, value: (mark, value), IDENTIFIER)),
)

PAIR = RULES.build("combinators_pair", lambda first, second: second + first, IDENTIFIER, Lit(","), IDENTIFIER)

NAMES = RULES.collect("combinators_names", Seq(IDENTIFIER, Star(Seq(Lit(","), IDENTIFIER))))

MAYBE_NAME = RULES.optional("combinators_maybe_name", IDENTIFIER)

CLOSED = RULES.build(
    "combinators_closed",
    lambda name: name,
    Lit("("),
    IDENTIFIER,
    Ch(Lit(")"), RULES.error("combinators_closed_error", "')'")),
)

NESTED = RULES.define("combinators_nested", Ch(Seq(Lit("("), NT("combinators_nested"), Lit(")")), Lit("x")))

RULES.define("combinators_until_brace", until("}"))
RULES.define("combinators_until_before_brace", Seq(until("}", consume=False), Lit("}")))
RULES.define("combinators_until_digit", until(Regex(r"[0-9]")))
RULES.define("combinators_until_before_digit", Seq(until(Regex(r"[0-9]"), consume=False), Cap(Regex(r"[0-9]"))))
RULES.define(
    "combinators_until_comma",
    Seq(until(",", consume=False, atom=Seq(Lit("("), until(")", capture=False))), Lit(",")),
)
RULES.define("combinators_until_close", Seq(until(Seq(OPT_WS, Lit("/}")), consume=False), OPT_WS, Lit("/}")))
RULES.define("combinators_spaced", spaced(IDENTIFIER))
RULES.define("combinators_else", open_cmd("else"))
RULES.define("combinators_case", open_cmd("case"))
RULES.define("combinators_close_if", close_cmd("if"))


def test_capture():
    assert RULES.parse("combinators_name", "abc") == "abc"


def test_parse_requires_entire_input():
    with pytest.raises(ParserException) as e:
        RULES.parse("combinators_name", "ab cd", filename="x.soy")
    assert e.value.file == "x.soy"
    assert str(e.value).startswith("Syntax error at line 1")


def test_node_marks():
    mark, value = RULES.parse("combinators_marked", "\n foo")
    assert value == "foo"
    assert mark.start == Position(2, 2, 2)
    assert mark.end == Position(5, 2, 5)
    assert mark.slice("\n foo") == "foo"


def test_build_and_collect():
    assert RULES.parse("combinators_pair", "ab,cd") == "cdab"
    assert RULES.parse("combinators_names", "a,b,c") == ("a", "b", "c")
    assert RULES.parse("combinators_names", "a") == ("a",)


def test_optional():
    assert RULES.parse("combinators_maybe_name", "") is None
    assert RULES.parse("combinators_maybe_name", "a") == "a"


def test_error_rule():
    assert RULES.parse("combinators_closed", "(ab)") == "ab"

    with pytest.raises(ParserException) as e:
        RULES.parse("combinators_closed", "(ab]")
    assert e.value.location == Position(3, 1, 4)
    assert e.value.value == "]"
    assert e.value.expected == ["')'"]
    assert "unexpected ']', expected one of: ')'" in str(e.value)

    with pytest.raises(ParserException) as e:
        RULES.parse("combinators_closed", "(ab")
    assert e.value.location.offset == 3
    assert e.value.value is None
    assert "unexpected end of input" in str(e.value)


def test_rule_defined_twice():
    with pytest.raises(GrammarError):
        RULES.define("combinators_name", Lit("a"))


def test_unknown_rule():
    with pytest.raises(GrammarError):
        RULES.parse("combinators_missing", "a")


def test_recursive_rule():
    assert RULES.parse("combinators_nested", "((x))") == ()
    with pytest.raises(ParserException):
        RULES.parse("combinators_nested", "((x)")


def test_recursion_limit_of_the_interpreter():
    depth = 5000
    with pytest.raises(NestingTooDeepException):
        RULES.parse("combinators_nested", "(" * depth + "x" + ")" * depth, max_depth=10)


def test_until():
    assert RULES.parse("combinators_until_brace", "abc}") == "abc"
    assert RULES.parse("combinators_until_brace", "}") == ""
    assert RULES.parse("combinators_until_before_brace", "ab}") == "ab"
    assert RULES.parse("combinators_until_digit", "ab1") == "ab"
    assert RULES.parse("combinators_until_before_digit", "ab1") == ("ab", "1")


def test_until_fails_at_end_of_input():
    with pytest.raises(ParserException):
        RULES.parse("combinators_until_brace", "abc")
    with pytest.raises(ParserException):
        RULES.parse("combinators_until_digit", "abc")


def test_until_skips_atoms():
    assert RULES.parse("combinators_until_comma", "f(a,b),") == "f(a,b)"


def test_until_stops_before_whitespace():
    assert RULES.parse("combinators_until_close", "a b  /}") == "a b"
    assert RULES.parse("combinators_until_close", " /}") == ""


def test_until_long_input():
    assert len(RULES.parse("combinators_until_brace", "a" * 100000 + "}")) == 100000
    assert len(RULES.parse("combinators_until_digit", "a" * 20000 + "1")) == 20000
    spaces = " " * 20000
    assert RULES.parse("combinators_until_close", "a" + spaces + "b" + spaces + "/}") == "a" + spaces + "b"


def test_spaced():
    assert RULES.parse("combinators_spaced", "  a \n") == "a"
    assert RULES.parse("combinators_spaced", "a") == "a"


def test_open_cmd():
    assert RULES.parse("combinators_else", "{else}") == ()
    assert RULES.parse("combinators_else", '{else foo="bar"}') == ()
    assert RULES.parse("combinators_case", "{case 1, 2}") == ()
    with pytest.raises(ParserException):
        RULES.parse("combinators_else", "{elseif $x}")


def test_close_cmd():
    assert RULES.parse("combinators_close_if", "{/if}") == ()
    with pytest.raises(ParserException):
        RULES.parse("combinators_close_if", "{/iff}")


def test_position_tracker():
    tracker = PositionTracker("ab\ncd\n")
    assert tracker.pos_to_lnr_col(0) == (1, 1)
    assert tracker.pos_to_lnr_col(2) == (1, 3)
    assert tracker.pos_to_lnr_col(3) == (2, 1)
    assert tracker.pos_to_lnr_col(6) == (3, 1)
    assert tracker.lnr_col_to_pos(2, 2) == 4
    assert tracker.lnr_col_to_pos(3, 1) == 6
    # clamped to the end of the text
    assert tracker.lnr_col_to_pos(3, 10) == 6
