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

from typing import Optional, Union

from pe.operators import Capture as Cap
from pe.operators import Choice as Ch
from pe.operators import Literal as Lit
from pe.operators import Regex
from pe.operators import Sequence as Seq
from pe.operators import Star

from soyparse.ast import Mark
from soyparse.ast.body import Attribute, Body, Interpolation
from soyparse.ast.declarations import DelTemplate, ParamDeclaration, SoyDoc, Template
from soyparse.parser.body import block
from soyparse.parser.combinators import IDENTIFIER, OPT_WS, RULES, WS, spaced, until
from soyparse.parser.tokens import ATTRIBUTES, DELTEMPLATE_ATTRIBUTES, NAMESPACE_PATH, TEMPLATE_NAME

# Doc blocks: `/**`, lines separated by newlines, `*/`. Lines may be prefixed with `*`.
DOC_LINE_PREFIX = Regex(r"[ \t]*(?:\*(?!/)[ \t]*)?")
DOC_TEXT = Cap(Regex(r"(?:(?!\*/)[^\n])*"))

# `?` after `@param` marks an optional parameter, the value is None when it is absent
OPTIONAL_MARKER = RULES.optional("optional_marker", Cap(Lit("?")))


def make_doc_param(mark: Mark, marker: Optional[str], name: str, description: str) -> ParamDeclaration:
    return ParamDeclaration(mark, marker is None, name, "any", description.strip() or None)


DOC_PARAM = RULES.node("doc_param", make_doc_param, Lit("@param"), OPTIONAL_MARKER, Regex(r"[ \t]+"), IDENTIFIER, DOC_TEXT)


def make_doc(mark: Mark, *lines: Union[str, ParamDeclaration]) -> SoyDoc:
    """
    Separate the `@param` lines from the prose. Prose lines are right stripped, blank lines around the text are dropped.
    """
    text: list[str] = []
    params: list[ParamDeclaration] = []
    for line in lines:
        if isinstance(line, ParamDeclaration):
            params.append(line)
        else:
            text.append(line.rstrip())
    while text and not text[0]:
        text.pop(0)
    while text and not text[-1]:
        text.pop()
    return SoyDoc(mark, "\n".join(text), tuple(params))


DOC_LINE = Seq(DOC_LINE_PREFIX, Ch(DOC_PARAM, DOC_TEXT))

SOY_DOC = RULES.node("soy_doc", make_doc, Lit("/**"), DOC_LINE, Star(Seq(Lit("\n"), DOC_LINE)), Lit("*/"))

TEMPLATE_DOC = RULES.optional("template_doc", Seq(SOY_DOC, OPT_WS))


def make_param_declaration(mark: Mark, marker: Optional[str], name: str, type_expr: str) -> ParamDeclaration:
    return ParamDeclaration(mark, marker is None, name, type_expr.rstrip())


# {@param name: type} or {@param? name: type}, the type is kept as written
PARAM_DECLARATION = RULES.node(
    "param_declaration",
    make_param_declaration,
    Lit("{@param"),
    OPTIONAL_MARKER,
    WS,
    IDENTIFIER,
    OPT_WS,
    Lit(":"),
    OPT_WS,
    until("}"),
)

PARAM_DECLARATIONS = RULES.collect("param_declarations", Star(spaced(PARAM_DECLARATION)))

TemplateBlock = tuple[str, tuple[Attribute, ...], tuple[ParamDeclaration, ...], Body]

TEMPLATE_BLOCK = block(
    "template_block",
    "template",
    Seq(Lit("{template"), WS, TEMPLATE_NAME, ATTRIBUTES, OPT_WS, Lit("}"), PARAM_DECLARATIONS),
    lambda mark, name, attributes, params, *body: (name, attributes, params, body),
)


def make_template(mark: Mark, doc: Optional[SoyDoc], template: TemplateBlock) -> Template:
    name, attributes, params, body = template
    return Template(mark, doc=doc, name=name, attributes=attributes, params=params, body=body)


TEMPLATE = RULES.node("template", make_template, TEMPLATE_DOC, TEMPLATE_BLOCK)

VARIANT = RULES.node("variant", Interpolation, Lit('"'), until('"'))


DelTemplateHead = tuple[str, Optional[Interpolation], tuple[Attribute, ...], tuple[ParamDeclaration, ...]]


def make_deltemplate_head(
    name: str,
    before: tuple[Attribute, ...],
    variant: Optional[Interpolation],
    after: tuple[Attribute, ...],
    params: tuple[ParamDeclaration, ...],
) -> DelTemplateHead:
    return name, variant, before + after, params


# `variant="..."` may appear anywhere between the other attributes
DELTEMPLATE_HEAD = RULES.build(
    "deltemplate_head",
    make_deltemplate_head,
    Lit("{deltemplate"),
    WS,
    TEMPLATE_NAME,
    DELTEMPLATE_ATTRIBUTES,
    RULES.optional("deltemplate_variant", Seq(OPT_WS, Lit("variant="), VARIANT)),
    DELTEMPLATE_ATTRIBUTES,
    OPT_WS,
    Lit("}"),
    PARAM_DECLARATIONS,
)

DELTEMPLATE_BLOCK = block("deltemplate_block", "deltemplate", DELTEMPLATE_HEAD, lambda mark, head, *body: (head, body))


def make_deltemplate(mark: Mark, doc: Optional[SoyDoc], deltemplate: tuple[DelTemplateHead, Body]) -> DelTemplate:
    (name, variant, attributes, params), body = deltemplate
    return DelTemplate(mark, doc=doc, name=name, variant=variant, attributes=attributes, params=params, body=body)


DELTEMPLATE = RULES.node("deltemplate", make_deltemplate, TEMPLATE_DOC, DELTEMPLATE_BLOCK)

# {namespace a.b.c attributes}, the value is (path, attributes)
NAMESPACE_CMD = RULES.build(
    "namespace_cmd",
    lambda path, attributes: (path, attributes),
    Lit("{namespace"),
    WS,
    NAMESPACE_PATH,
    ATTRIBUTES,
    OPT_WS,
    Lit("}"),
)
