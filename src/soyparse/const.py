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

from enum import Enum

# Wrapper blocks and the interior commands that may appear directly inside them.
# Interior commands are recognized and dropped, they produce no node.
WRAPPER_COMMANDS: dict[str, tuple[str, ...]] = {
    "if": ("elseif", "else"),
    "foreach": ("ifempty",),
    "for": (),
    "msg": ("fallbackmsg",),
    "switch": ("case", "default"),
    "plural": ("case", "default"),
    "select": ("case", "default"),
    "literal": (),
    "log": (),
}

INTERIOR_COMMANDS: tuple[str, ...] = tuple(sorted({name for names in WRAPPER_COMMANDS.values() for name in names}))

# Commands with a dedicated rule in the body grammar
STRUCTURED_COMMANDS: tuple[str, ...] = ("call", "delcall", "let", "param")

DECLARATION_COMMANDS: tuple[str, ...] = ("namespace", "template", "deltemplate")

# Nothing starting with one of these keywords can be an interpolation
COMMAND_KEYWORDS: tuple[str, ...] = tuple(
    sorted(set(WRAPPER_COMMANDS) | set(INTERIOR_COMMANDS) | set(STRUCTURED_COMMANDS) | set(DECLARATION_COMMANDS))
)

DEFAULT_FILENAME = "<input>"


class OutputFormat(str, Enum):
    json = "json"
    yaml = "yaml"


ENVIRON_FORCE_TTY = "FORCE_TTY"

# Exit codes of the command line tool
EXIT_OK = 0
EXIT_FAILURE = 1
