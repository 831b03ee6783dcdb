"""Renderable segments of generated code.

A generated call tree is made of three kinds of nodes: method calls,
comments chained between calls, and the empty call used for elements
that produce no code. All of them render through build_code(indent) and
report the imports they require.
"""

from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from jmeter_codegen.core.method_call import EmptyCall, MethodCall

INDENT = "  "

CodeNode = Union["MethodCall", "Comment", "EmptyCall"]


class Comment:
    """Line comment placed in a chain of method calls.

    Example:
        >>> Comment("check this value").build_code("  ")
        '// check this value'
    """

    def __init__(self, comment: str) -> None:
        self.comment = comment

    def build_code(self, indent: str) -> str:
        return "// " + self.comment

    def get_imports(self) -> set[str]:
        return set()

    def get_static_imports(self) -> set[str]:
        return set()

    def get_method_definitions(self) -> dict[str, "MethodCall"]:
        return {}

    def __repr__(self) -> str:
        return f"Comment({self.comment!r})"
