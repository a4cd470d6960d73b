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

from pe.operators import Capture as Cap
from pe.operators import Literal as Lit
from pe.operators import Not
from pe.operators import Optional as Opt
from pe.operators import Regex
from pe.operators import Sequence as Seq
from pe.operators import Star

from soyparse.ast.body import Attribute
from soyparse.parser.combinators import IDENTIFIER, IDENTIFIER_PATTERN, OPT_WS, RULES, until

ATTRIBUTE_NAME = Cap(Regex(r"[A-Za-z][A-Za-z0-9_-]*"))

# name="value", the value is kept as written
ATTRIBUTE = RULES.node("attribute", Attribute, ATTRIBUTE_NAME, Lit('="'), until('"'))

# zero or more attributes, each optionally preceded by whitespace. The value is a tuple.
ATTRIBUTES = RULES.collect("attributes", Star(Seq(OPT_WS, ATTRIBUTE)))

# the attributes of a deltemplate, `variant` has a rule of its own
DELTEMPLATE_ATTRIBUTES = RULES.collect("deltemplate_attributes", Star(Seq(OPT_WS, Not(Lit("variant=")), ATTRIBUTE)))

NAMESPACE_PATH = RULES.collect("namespace_path", Seq(IDENTIFIER, Star(Seq(Lit("."), IDENTIFIER))))

# `.foo` or `a.b.foo`, the value is the name as written
TEMPLATE_NAME = Cap(Seq(Opt(Lit(".")), Regex(IDENTIFIER_PATTERN), Star(Seq(Lit("."), Regex(IDENTIFIER_PATTERN)))))
