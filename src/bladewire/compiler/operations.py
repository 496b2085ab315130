"""Linear operation model produced by lowering a directive tree.

A compiled template body is an ordered list of two operation kinds:

- `EmitLiteral`: push a fixed string
- `EmitExpression`: evaluate a Python expression and push its string form

Control structures do not add operation kinds. A conditional lowers to one
EmitExpression whose value is a ternary chain choosing between fragment
calls; a loop lowers to one EmitExpression calling ``_loop`` with a
fragment per item. A `Fragment` is itself an operation list, emitted as a
nested function so it closes over the enclosing loop-bound names.

"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class EmitLiteral:
    """Push ``text`` unchanged."""

    text: str


@dataclass(frozen=True, slots=True)
class EmitExpression:
    """Evaluate ``value`` and push the result.

    Attributes:
        value: Python expression node
        lineno: Template line, written to the render context before evaluation
        escape: HTML-escape the result (``{{ }}``)
        trusted: The value is already rendered markup; push as is
    """

    value: ast.expr
    lineno: int
    escape: bool = False
    trusted: bool = False


Operation = EmitLiteral | EmitExpression


@dataclass(slots=True)
class Fragment:
    """A named operation list emitted as a nested function.

    ``children`` are fragments used by this fragment's operations; they are
    defined inside its function body.
    """

    name: str
    params: tuple[str, ...]
    ops: list[Operation] = field(default_factory=list)
    children: list[Fragment] = field(default_factory=list)

    @property
    def literal(self) -> str | None:
        """Joined text when every operation is a literal, else None."""
        if self.children or any(not isinstance(op, EmitLiteral) for op in self.ops):
            return None
        return "".join(op.text for op in self.ops)  # type: ignore[union-attr]
