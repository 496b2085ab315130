"""bladewire compiler: ParsedTemplate → operation list → Python code object.

Example:
    >>> from bladewire.compiler import Compiler
    >>> from bladewire.parser import parse
    >>> code = Compiler().compile(parse("Count: ${count}"), name="counter")
    >>> namespace = {**STATIC_NAMESPACE}
    >>> exec(code, namespace)
    >>> namespace["render"]({"count": 3})  # inside a render context
    'Count: 3'

"""

from bladewire.compiler.core import Compiler
from bladewire.compiler.operations import EmitExpression, EmitLiteral, Fragment

__all__ = ["Compiler", "EmitExpression", "EmitLiteral", "Fragment"]
