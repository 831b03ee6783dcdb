"""Call tree of generated DSL builder invocations.

A MethodCall is one builder invocation (e.g. threadGroup(...)) with its
parameters and the calls fluently chained after it. Children of a test
element are added to the call's children slot, which is either the
call's own trailing varargs parameter or a chained children(...) call.

Example:
    >>> plan = MethodCall.from_builder_method(test_plan_method, ChildrenParam("TestPlanChild[]"))
    >>> plan.child(thread_group_call)
    >>> print(plan.build_code())
    testPlan(
      threadGroup(1, 1)
    )
"""

import re
from typing import Optional

from jmeter_codegen.core.code_segment import INDENT, CodeNode, Comment
from jmeter_codegen.core.params import BoolParam, ChildrenParam, MethodParam
from jmeter_codegen.core.registry import BuilderMethod, BuilderRegistry, default_registry
from jmeter_codegen.exceptions import InvariantViolationException, UnsupportedMappingException

BLANK_LINES_PATTERN = re.compile(r"\n\s*\n")


class MethodCallBase:
    """Data and rendering of a builder call.

    Attributes:
        method_name: Name of the invoked method (may be qualified, e.g. "Duration.ofSeconds")
        target_type: Builder type returned by the call, used to resolve chained calls
        params: Parameters in declaration order
        required_static_imports: Classes whose static members the call needs
        required_imports: Classes the call needs imported
        registry: DSL surface used to resolve chained and children calls
    """

    def __init__(
        self,
        method_name: Optional[str],
        target_type: str,
        *params: MethodParam,
        registry: Optional[BuilderRegistry] = None,
    ) -> None:
        self.method_name = method_name
        self.target_type = target_type
        self.params: list[MethodParam] = list(params)
        self.registry = registry if registry is not None else default_registry()
        self.required_static_imports: set[str] = set()
        self.required_imports: set[str] = set()
        self._chain: list[CodeNode] = []
        self._method_definitions: dict[str, "MethodCall"] = {}
        self._commented = False
        self._heading_comment: Optional[str] = None

    def set_commented(self, commented: bool) -> None:
        self._commented = commented

    def is_commented(self) -> bool:
        return self._commented

    def heading_comment(self, comment: str) -> None:
        self._heading_comment = comment

    def add_method_definition(self, name: str, method_call: "MethodCall") -> None:
        """Register a method whose body is the given call, declared alongside the test."""
        self._method_definitions[name] = method_call

    def _active_params(self) -> list[MethodParam]:
        return [p for p in self.params if not p.is_ignored()]

    def get_static_imports(self) -> set[str]:
        ret = set(self.required_static_imports)
        for param in self._active_params():
            ret.update(param.get_static_imports())
        for segment in self._chain:
            ret.update(segment.get_static_imports())
        for definition in self.get_method_definitions().values():
            ret.update(definition.get_static_imports())
        return ret

    def get_imports(self) -> set[str]:
        ret = set(self.required_imports)
        for param in self._active_params():
            ret.update(param.get_imports())
        for segment in self._chain:
            ret.update(segment.get_imports())
        for definition in self.get_method_definitions().values():
            definition_type = self.registry.get_type(definition.target_type)
            if definition_type is not None:
                ret.add(definition_type.qualified_name)
            ret.update(definition.get_imports())
        return ret

    def get_method_definitions(self) -> dict[str, "MethodCall"]:
        ret = dict(self._method_definitions)
        for param in self._active_params():
            ret.update(param.get_method_definitions())
        for segment in self._chain:
            ret.update(segment.get_method_definitions())
        return ret

    def build_params_code(self, indent: str) -> str:
        params_code = (p.build_code(indent) for p in self._active_params())
        ret = ", ".join(code for code in params_code if code)
        return BLANK_LINES_PATTERN.sub("\n", ret.replace(", \n", ",\n"))

    def build_chained_code(self, indent: str) -> str:
        ret = []
        for segment in self._chain:
            segment_code = segment.build_code(indent)
            if segment_code:
                connector = "." if isinstance(segment, MethodCallBase) else ""
                ret.append("\n" + indent + connector + segment_code)
        return "".join(ret)

    def build_code(self, indent: str = "") -> str:
        """Render the call, its parameters and its chain as Java source.

        Args:
            indent: Indentation of the line where the call starts

        Returns:
            Source code of the call. Nested lines are indented relative to
            the given indent.
        """
        ret = []
        if self._heading_comment is not None:
            ret.append("// " + self._heading_comment + "\n" + indent)
        ret.append(f"{self.method_name}(")
        child_indent = indent + INDENT
        params_code = self.build_params_code(child_indent)
        ret.append(params_code)
        has_children = params_code.endswith("\n")
        if has_children:
            ret.append(indent)
        ret.append(")")
        chained_code = self.build_chained_code(child_indent)
        if chained_code and has_children:
            chained_code = chained_code[1 + len(child_indent):]
        ret.append(chained_code)
        code = "".join(ret)
        return self._comment_code(code, indent) if self._commented else code

    @staticmethod
    def _comment_code(code: str, indent: str) -> str:
        return "//" + code.replace("\n" + indent, "\n" + indent + "//")

    def build_assignment_code(self, indent: str) -> str:
        """Render the call as the right side of an assignment or return."""
        ret = self.build_code(indent)
        indented_parenthesis = INDENT + ")"
        if not self._chain and ret.endswith(indented_parenthesis):
            return ret[: -len(indented_parenthesis)] + ")"
        return ret

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.method_name!r}, {self.target_type!r})"


class MethodCall(MethodCallBase):
    """Builder call supporting chaining and children composition."""

    def __init__(
        self,
        method_name: Optional[str],
        target_type: str,
        *params: MethodParam,
        registry: Optional[BuilderRegistry] = None,
    ) -> None:
        super().__init__(method_name, target_type, *params, registry=registry)
        self._children_param: Optional[ChildrenParam] = None

    @classmethod
    def from_builder_method(
        cls,
        method: BuilderMethod,
        *params: MethodParam,
        registry: Optional[BuilderRegistry] = None,
    ) -> "MethodCall":
        """Create a call to a static builder method, imported statically."""
        ret = cls(method.name, method.resolve_return_type(method.declaring_type), *params, registry=registry)
        declaring_type = ret.registry.get_type(method.declaring_type)
        ret.required_static_imports.add(
            declaring_type.qualified_name if declaring_type else method.declaring_type
        )
        return ret

    @classmethod
    def for_static_method(
        cls,
        type_name: str,
        method_name: str,
        *params: MethodParam,
        registry: Optional[BuilderRegistry] = None,
    ) -> "MethodCall":
        """Create a call qualified by its class, e.g. JmeterDsl.testPlan(...).

        Raises:
            UnsupportedMappingException: If the type declares no single public
                static method matching the name and params
        """
        registry = registry if registry is not None else default_registry()
        method = registry.find_static_method(type_name, method_name, params)
        ret = cls(
            f"{type_name}.{method.name}",
            method.resolve_return_type(type_name),
            *params,
            registry=registry,
        )
        ret.required_imports.add(registry.get_type(type_name).qualified_name)
        return ret

    @staticmethod
    def empty_call() -> "EmptyCall":
        return EMPTY_CALL

    def child(self, child: CodeNode) -> "MethodCall":
        self._solve_children_param().add_child(child)
        return self

    def replace_child(self, original: CodeNode, replacement: CodeNode) -> None:
        self._solve_children_param().replace_child(original, replacement)

    def prepend_child(self, child: CodeNode) -> None:
        self._solve_children_param().prepend_child(child)

    def _solve_children_param(self) -> ChildrenParam:
        if self._children_param is None:
            last_param = self.params[-1] if self.params else None
            if isinstance(last_param, ChildrenParam) and not self._chain:
                self._children_param = last_param
            else:
                children_call = self._find_children_method()
                self._chain.append(children_call)
                self._children_param = children_call.children_param
        return self._children_param

    def _find_children_method(self) -> "ChildrenMethodCall":
        method = self.registry.find_children_method(self.target_type)
        if method is None:
            raise InvariantViolationException(
                f"No children method found for {self.target_type}. This might be due to "
                f"unexpected test plan structure or missing method in test element."
            )
        return ChildrenMethodCall(method, self.target_type, registry=self.registry)

    def chain(self, method_name: str, *params: MethodParam) -> "MethodCall":
        """Chain a call to the given method, unless all params are defaults.

        A single boolean param is dropped when a no-args overload exists.

        Returns:
            This call, to keep chaining on it

        Raises:
            UnsupportedMappingException: If no method matches the params
        """
        if params and all(p.is_default() for p in params):
            return self
        method = None
        if len(params) == 1 and isinstance(params[0], BoolParam):
            method = self.registry.find_method(self.target_type, method_name, ())
            if method is not None:
                params = ()
        if method is None:
            method = self.registry.find_method(self.target_type, method_name, params)
        if method is None:
            raise UnsupportedMappingException(method_name, self.target_type, params)
        self._chain.append(
            MethodCall(
                method.name,
                method.resolve_return_type(self.target_type),
                *params,
                registry=self.registry,
            )
        )
        return self

    def chain_node(self, node: CodeNode) -> CodeNode:
        """Chain a pre built node and return it, to continue chaining on it."""
        self._chain.append(node)
        return node

    def chain_comment(self, comment: str) -> "MethodCall":
        """Add a comment in the chain, e.g. to point out values to review."""
        self._chain.append(Comment(comment))
        return self

    def re_chain(self, other: "MethodCall") -> None:
        self._chain.extend(other._chain)

    def unchain(self, method_name: str) -> None:
        self._chain = [
            segment
            for segment in self._chain
            if not (isinstance(segment, MethodCallBase) and segment.method_name == method_name)
        ]

    def chain_size(self) -> int:
        return len(self._chain)


class ChildrenMethodCall(MethodCall):
    """Chained children(...) call, rendered only when it has children."""

    def __init__(
        self,
        method: BuilderMethod,
        receiver_type: str,
        registry: Optional[BuilderRegistry] = None,
    ) -> None:
        self.children_param = ChildrenParam(method.param_types[0])
        super().__init__(
            method.name,
            method.resolve_return_type(receiver_type),
            self.children_param,
            registry=registry,
        )

    def build_code(self, indent: str = "") -> str:
        params_code = self.build_params_code(indent + INDENT)
        return f"{self.method_name}({params_code}{indent})" if params_code else ""


class EmptyCall:
    """Call producing no code, which silently drops any children."""

    method_name = None
    target_type = "MultiLevelTestElement"

    def child(self, child: CodeNode) -> "EmptyCall":
        return self

    def replace_child(self, original: CodeNode, replacement: CodeNode) -> None:
        pass

    def prepend_child(self, child: CodeNode) -> None:
        pass

    def set_commented(self, commented: bool) -> None:
        pass

    def build_code(self, indent: str = "") -> str:
        return ""

    def get_imports(self) -> set[str]:
        return set()

    def get_static_imports(self) -> set[str]:
        return set()

    def get_method_definitions(self) -> dict[str, MethodCall]:
        return {}

    def __repr__(self) -> str:
        return "EmptyCall()"


EMPTY_CALL = EmptyCall()
