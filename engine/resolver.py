"""
Expression resolution: turn template input (raw text or a compiled expression) into a validated, optionally group-scoped expression.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from engine.enums import ReturnType
from engine.exceptions import ExpressionError, InputError, ReturnTypeError
from engine.expr import Expression, FuncSet, compile_expression
from engine.tags import TagSet, replace_tags

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawText:
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Compiled:
    expression: Expression

    def __str__(self) -> str:
        return self.expression.text


ExprInput = Union[RawText, Compiled]


@dataclass(frozen=True)
class ResolvedExpression:
    expression: Expression
    display: str
    source: ExprInput


class _ScopeLiterals(ast.NodeTransformer):
    def __init__(self, group: TagSet):
        self.group = group

    def visit_Constant(self, node: ast.Constant) -> ast.AST:
        if isinstance(node.value, str):
            return ast.copy_location(ast.Constant(value=replace_tags(node.value, self.group)), node)
        return node


def scope_text(text: str, group: TagSet) -> str:
    """Substitute ``group`` into the tag blocks of every string literal in ``text``.

    Literals are rewritten after parsing, so the quoting style of the
    expression does not affect which placeholders are found.
    """
    try:
        tree = ast.parse(str(text).strip(), mode="eval")
    except SyntaxError as exc:
        raise ExpressionError(f"{text}: syntax error: {exc.msg}") from exc
    return ast.unparse(_ScopeLiterals(group).visit(tree))


def as_input(value: Any) -> ExprInput:
    if isinstance(value, (RawText, Compiled)):
        return value
    if isinstance(value, str):
        return RawText(value)
    if isinstance(value, Expression):
        return Compiled(value)
    raise InputError(f"expected string or expression, got {type(value).__name__} ({value!r})")


def resolve(
    value: Any,
    funcs: FuncSet,
    group: Optional[TagSet] = None,
    series: bool = False,
) -> ResolvedExpression:
    """Compile ``value`` and apply the caller's constraints.

    ``group`` scopes the expression to one tag group by substituting it into
    the expression's tag placeholders and recompiling. ``series`` demands a
    series-typed expression, as graphs do.
    """
    source = as_input(value)
    if isinstance(source, RawText):
        try:
            expression = compile_expression(source.text, funcs)
        except ExpressionError as exc:
            raise ExpressionError(f"{source}: {exc}") from exc
    else:
        expression = source.expression

    if group is not None:
        scoped = scope_text(expression.text, group)
        log.debug("resolve: scoped %r to %s", expression.text, group)
        expression = compile_expression(scoped, funcs)

    if series and expression.return_type is not ReturnType.series:
        raise ReturnTypeError("requires an expression that returns a series")

    return ResolvedExpression(expression=expression, display=str(expression), source=source)
