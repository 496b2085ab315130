"""Component invocation parsing: @component, @slot, @endcomponent."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field

from bladewire._types import Token, TokenType
from bladewire.environment.exceptions import ErrorCode
from bladewire.nodes import ComponentCall, ComponentRef, Node
from bladewire.parser.arguments import parse_props, split_arguments, string_literal
from bladewire.parser.blocks.core import END_DIRECTIVES, BlockStackMixin

# How many tokens past an opener to search for its @endcomponent
COMPONENT_LOOKAHEAD = 2000

_BODY_END = frozenset({"endcomponent", "slot"})
_SLOT_END = frozenset({"endslot"})
_NESTING = ("if", "foreach", "slot")
_CLOSES = {END_DIRECTIVES[name]: name for name in _NESTING}


@dataclass(slots=True)
class _Candidate:
    """An opener still looking for its @endcomponent."""

    opener: int
    limit: int
    depth: dict[str, int] = field(default_factory=lambda: dict.fromkeys(_NESTING, 0))

    def step(self, name: str) -> bool:
        """Account for directive ``name``; False if it rules out a body."""
        depth = self.depth
        if name == "endcomponent":
            return not any(depth.values())
        if name in depth:
            depth[name] += 1
        elif name in _CLOSES:
            opener = _CLOSES[name]
            if depth[opener] == 0:
                return False
            depth[opener] -= 1
        elif name in ("elseif", "else"):
            return depth["if"] > 0
        elif name in ("section", "endsection"):
            return False
        return True


def match_component_ends(tokens: Sequence[Token], start: int = 0) -> dict[int, int]:
    """Pair each @component opener at or after ``start`` with its closer.

    One forward pass with a stack of open candidates. A directive that
    rules out a body for the innermost candidate drops it, and the
    candidate enclosing it takes over the block depths it had counted, as
    if the dropped opener had been bodiless from the start. Candidates
    whose lookahead window has run out are dropped from the bottom of the
    stack, since older openers have the nearer limits.

    Returns:
        Opener index → @endcomponent index; bodiless openers are absent
    """
    ends: dict[int, int] = {}
    stack: deque[_Candidate] = deque()
    for i in range(start, len(tokens)):
        while stack and i >= stack[0].limit:
            stack.popleft()
        token = tokens[i]
        if token.type is not TokenType.DIRECTIVE:
            continue
        name = token.value
        if name == "component":
            stack.append(_Candidate(i, i + 1 + COMPONENT_LOOKAHEAD))
            continue
        while stack:
            candidate = stack[-1]
            if candidate.step(name):
                if name == "endcomponent":
                    ends[candidate.opener] = i
                    stack.pop()
                break
            stack.pop()
            if stack:
                enclosing = stack[-1].depth
                for key, count in candidate.depth.items():
                    enclosing[key] += count
    return ends


class ComponentBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing sub-component invocations.

    ``@component('Name', [props])`` may or may not have a body. It has one
    only when a matching ``@endcomponent`` follows within
    COMPONENT_LOOKAHEAD tokens with every @if, @foreach and @slot between
    them balanced. A closer that would pair across an unmatched
    conditional belongs to some other invocation, so the opener is
    treated as bodiless.

    Required Host Attributes:
        - All from BlockStackMixin
        - _tokens, _pos: token list and cursor
        - _components: placeholder id → ComponentCall
        - _component_ends: cached `match_component_ends` result, reset to
          None whenever tokens are spliced in
        - _parse_body: method
    """

    _tokens: list[Token]
    _pos: int
    _components: dict[str, ComponentCall]
    _component_ends: dict[int, int] | None

    def _has_component_body(self, index: int) -> bool:
        if self._component_ends is None:
            self._component_ends = match_component_ends(self._tokens, index)
        return index in self._component_ends

    def _parse_component(self, excluded: frozenset[str]) -> ComponentRef:
        index = self._pos
        token = self._advance()
        args = split_arguments(token.args or "")
        type_name = string_literal(args[0]) if args else None
        props = parse_props(args[1], excluded) if len(args) > 1 else []
        if type_name is None or props is None or len(args) > 2:
            raise self._error(
                f"Invalid @component arguments: {token.args!r}",
                token,
                code=ErrorCode.INVALID_ARGUMENTS,
                suggestion="Use @component('Name') or @component('Name', [key => value])",
            )

        slot: tuple[Node, ...] | None = None
        slots: dict[str, tuple[Node, ...]] = {}
        if self._has_component_body(index):
            self._push_block("component", token)
            slot, slots = self._parse_component_body(excluded)
            self._consume_end("component")

        placeholder = f"component-{len(self._components)}"
        self._components[placeholder] = ComponentCall(
            lineno=token.lineno,
            col_offset=token.col_offset,
            type_name=type_name,
            props=tuple(props),
            slot=slot,
            slots=slots,
        )
        return ComponentRef(lineno=token.lineno, col_offset=token.col_offset, placeholder=placeholder)

    def _parse_component_body(
        self, excluded: frozenset[str]
    ) -> tuple[tuple[Node, ...], dict[str, tuple[Node, ...]]]:
        """Collect the default slot and any named @slot bodies."""
        default: list[Node] = []
        named: dict[str, tuple[Node, ...]] = {}
        while True:
            default.extend(self._parse_body(excluded, _BODY_END))
            if self._current.value == "endcomponent":
                return tuple(default), named
            slot_token = self._advance()
            name = string_literal(slot_token.args or "")
            if name is None:
                raise self._error(
                    f"@slot expects a quoted name, got {slot_token.args!r}",
                    slot_token,
                    code=ErrorCode.INVALID_ARGUMENTS,
                )
            self._push_block("slot", slot_token)
            named[name] = tuple(self._parse_body(excluded, _SLOT_END))
            self._consume_end("slot")
