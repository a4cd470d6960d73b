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
from collections import abc

SEPARATOR = "."

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")


def split_path(path: str) -> tuple[str, ...]:
    """
    Split a dotted path into its segments.

    :raises ValueError: when a segment is not a valid identifier
    """
    segments = tuple(path.split(SEPARATOR))
    for segment in segments:
        if not IDENTIFIER.match(segment):
            raise ValueError("invalid path %r: %r is not an identifier" % (path, segment))
    return segments


def join_path(segments: abc.Sequence[str]) -> str:
    return SEPARATOR.join(segments)


def is_relative(name: str) -> bool:
    """
    Template names starting with a dot are relative to the namespace of the file they appear in.
    """
    return name.startswith(SEPARATOR)


def resolve_template_name(name: str, namespace: abc.Sequence[str]) -> str:
    """
    Turn a template name as written in the source into a fully qualified name.

    `.foo` in namespace `a.b` becomes `a.b.foo`, fully qualified names are returned unchanged.
    """
    if is_relative(name):
        split_path(name[1:])
        return join_path(list(namespace) + [name[1:]])
    split_path(name)
    return name
