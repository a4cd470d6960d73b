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

import bisect
import re
import threading
from typing import Callable, Optional, Union

import pe
from pe._grammar import Grammar
from pe.actions import Action
from pe.operators import Capture as Cap
from pe.operators import Choice as Ch
from pe.operators import Dot as DOT
from pe.operators import Literal as Lit
from pe.operators import Nonterminal as NT
from pe.operators import Not
from pe.operators import Optional as Opt
from pe.operators import Regex
from pe.operators import Sequence as Seq
from pe.operators import Star
from pe.packrat import PackratParser

from soyparse import const
from soyparse.ast import Mark, Node, Position, too_deep
from soyparse.parser import GrammarError, NestingTooDeepException, ParserException
from soyparse.parser import config as parser_config

ActionFunction = Callable[[str, int, int, list[object]], object]

START = "Start"


class PositionTracker:
    """Convert between a flat character offset and (line_nr, col), both 1-based, using bisect."""

    def __init__(self, text: str) -> None:
        self.length = len(text)
        self._line_starts: list[int] = [0]
        for i, c in enumerate(text):
            if c == "\n":
                self._line_starts.append(i + 1)

    def pos_to_lnr_col(self, pos: int) -> tuple[int, int]:
        idx = bisect.bisect_right(self._line_starts, pos) - 1
        return idx + 1, pos - self._line_starts[idx] + 1

    def lnr_col_to_pos(self, lnr: int, col: int) -> int:
        idx = min(max(lnr - 1, 0), len(self._line_starts) - 1)
        return min(self._line_starts[idx] + col - 1, self.length)


class _ParseState(threading.local):
    filename: str = const.DEFAULT_FILENAME
    tracker: Optional[PositionTracker] = None


_state: _ParseState = _ParseState()


def current_file() -> str:
    return _state.filename


def position(pos: int) -> Position:
    assert _state.tracker is not None
    line, column = _state.tracker.pos_to_lnr_col(pos)
    return Position(pos, line, column)


def mark(pos: int, end: int) -> Mark:
    return Mark(position(pos), position(end))


class PosAction(Action):  # type: ignore[misc]
    """Action that calls func(s, pos, end, args) and emits its result as the single value of the rule."""

    def __init__(self, func: ActionFunction) -> None:
        self.func = func

    def __call__(
        self,
        s: str,
        pos: int,
        end: int,
        args: tuple[object, ...],
        kwargs: dict[str, object],
    ) -> tuple[tuple[object, ...], Optional[dict[str, object]]]:
        return (self.func(s, pos, end, list(args)),), None


def P(fn: ActionFunction) -> PosAction:
    return PosAction(fn)


class RuleSet:
    """
    The named rules of the template grammar and the actions that build values from their matches.

    The modules of this package register their rules at import time. `define` returns a nonterminal, so a rule can be
    referenced before it is defined. A parser is built the first time a start rule is used.

    Unnamed expressions emit no value, except captures, which emit the matched text. Values flow up through sequences
    and repetitions until a rule with an action turns them into a single value.
    """

    def __init__(self) -> None:
        self.definitions: dict[str, object] = {}
        self.actions: dict[str, PosAction] = {}
        self._parsers: dict[str, PackratParser] = {}

    def define(self, name: str, expression: object, action: Optional[ActionFunction] = None) -> object:
        if name in self.definitions:
            raise GrammarError("rule %s is defined twice" % name)
        self.definitions[name] = expression
        if action is not None:
            self.actions[name] = P(action)
        self._parsers.clear()
        return NT(name)

    def node(self, name: str, constructor: Callable[..., object], *expressions: object) -> object:
        """
        A rule that builds `constructor(mark, *values)`, the mark spans the whole match.
        This is the only place where marks are attached to nodes.
        """
        return self.define(name, Seq(*expressions), lambda s, pos, end, args: constructor(mark(pos, end), *args))

    def build(self, name: str, func: Callable[..., object], *expressions: object) -> object:
        return self.define(name, Seq(*expressions), lambda s, pos, end, args: func(*args))

    def collect(self, name: str, expression: object) -> object:
        """The value is the tuple of all values emitted by the expression"""
        return self.define(name, expression, lambda s, pos, end, args: tuple(args))

    def optional(self, name: str, expression: object) -> object:
        """The value of the expression, None when it does not match"""
        return self.define(name, Opt(expression), lambda s, pos, end, args: args[0] if args else None)

    def error(self, name: str, *expected: str) -> object:
        """
        Matches without consuming input and raises a ParserException listing the expected tokens. Only use it as the
        last alternative at a point where no other parse of the input is possible.
        """

        def fail(s: str, pos: int, end: int, args: list[object]) -> object:
            value = s[pos] if pos < len(s) else None
            raise ParserException(position(pos), value, expected=expected, filename=_state.filename)

        return self.define(name, Regex(""), fail)

    def parser(self, start: str) -> PackratParser:
        parser = self._parsers.get(start)
        if parser is None:
            if start not in self.definitions:
                raise GrammarError("rule %s is not defined" % start)
            definitions = dict(self.definitions)
            definitions[START] = Seq(NT(start), EOF)
            actions = dict(self.actions)
            actions[START] = P(lambda s, pos, end, args: args[0] if len(args) == 1 else tuple(args))
            # no ignore pattern, whitespace is significant in template bodies
            parser = PackratParser(Grammar(definitions, actions=actions, start=START), ignore=None)
            self._parsers[start] = parser
        return parser

    def parse(
        self, start: str, source: str, filename: str = const.DEFAULT_FILENAME, max_depth: Optional[int] = None
    ) -> object:
        """
        Match a rule against the entire source.

        :param max_depth: the nesting limit, the parser.max_nesting_depth option when None
        :raises ParserException: the source does not match the rule
        :raises NestingTooDeepException: the result is nested deeper than the limit
        """
        limit = max_depth if max_depth is not None else parser_config.max_nesting_depth.get()
        parser = self.parser(start)
        _state.filename = filename
        _state.tracker = PositionTracker(source)

        try:
            m = parser.match(source, pos=0)
        except pe.ParseError as exc:
            # pe reports a 0-based line and offset instead of an absolute position
            if exc.lineno is not None:
                pos = _state.tracker.lnr_col_to_pos(exc.lineno + 1, (exc.offset or 0) + 1)
            else:
                pos = 0
            raise ParserException(position(pos), source[pos] if pos < len(source) else None, filename=filename) from exc
        except RecursionError as exc:
            raise NestingTooDeepException(position(0), limit, filename) from exc

        if m is None:
            raise ParserException(position(0), source[0] if source else None, filename=filename)

        result = m.value()
        if isinstance(result, Node):
            deepest = too_deep(result, limit)
            if deepest is not None:
                raise NestingTooDeepException(deepest.mark.start, limit, filename)
        return result


RULES: RuleSet = RuleSet()

WS = Regex(r"[ \t\r\n]+")
OPT_WS = Regex(r"[ \t\r\n]*")
IDENT_CHAR = Regex(r"[A-Za-z0-9_]")
IDENTIFIER_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"
IDENTIFIER = Cap(Regex(IDENTIFIER_PATTERN))
EOF = Not(DOT())


def until(
    terminator: Union[str, object], consume: bool = True, atom: Optional[object] = None, capture: bool = True
) -> object:
    """
    Consume input up to the terminator, the consumed text is emitted when `capture` is set.

    :param consume: consume the terminator as well, otherwise stop right before it
    :param atom: input matching this expression is skipped as a whole, the terminator is not looked for inside it

    A run of whitespace is skipped in one step, the terminator is looked for at its start but not inside it.
    """
    if isinstance(terminator, str) and atom is None:
        text = Regex(r"(?:(?!%s)[\s\S])*" % re.escape(terminator))
    else:
        if isinstance(terminator, str):
            terminator = Lit(terminator)
        step = Ch(atom, WS, DOT()) if atom is not None else Ch(WS, DOT())
        text = Star(Seq(Not(terminator), step))
    if capture:
        text = Cap(text)
    if consume:
        return Seq(text, Lit(terminator) if isinstance(terminator, str) else terminator)
    return text


def spaced(expression: object) -> object:
    """Optional whitespace before and after the expression"""
    return Seq(OPT_WS, expression, OPT_WS)


def open_cmd(name: str) -> object:
    """
    `{name` followed by anything up to and including the next `}`, no value is emitted.
    """
    return Seq(Lit("{" + name), Not(IDENT_CHAR), until("}", capture=False))


def close_cmd(name: str) -> object:
    return Lit("{/%s}" % name)
