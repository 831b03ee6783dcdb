"""Method parameters for generated DSL builder calls.

Each parameter knows the semantic type used to resolve the builder method
overload, whether it holds the callee's default value, and how to render
itself as Java source. Parameters may also require imports that the
generated code must declare.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Any, Optional, Sequence

from jmeter_codegen.exceptions import InvariantViolationException

if TYPE_CHECKING:
    from jmeter_codegen.core.code_segment import CodeNode
    from jmeter_codegen.core.method_call import MethodCall

DURATION_CLASS = "java.time.Duration"


class MethodParam:
    """Base class for all parameters of a generated method call.

    Attributes:
        param_type: Semantic type name used for overload resolution
            (e.g. "String", "int", "Duration", "ThreadGroupChild[]")
        expression: Textual form of the value as found in the test plan,
            None when the value is absent
    """

    def __init__(self, param_type: str, expression: Optional[str]) -> None:
        self.param_type = param_type
        self.expression = expression

    def is_default(self) -> bool:
        """Whether the value equals the default of the called method."""
        return False

    def is_ignored(self) -> bool:
        """Whether the parameter is excluded from matching and rendering."""
        return False

    def get_imports(self) -> set[str]:
        return set()

    def get_static_imports(self) -> set[str]:
        return set()

    def get_method_definitions(self) -> dict[str, "MethodCall"]:
        return {}

    def build_code(self, indent: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.expression!r})"


class FixedParam(MethodParam):
    """Parameter with a literal value and an optional default value.

    A fixed parameter is default when it has no value or its value equals
    the default one. It can be flagged as ignored, which drops it from
    both overload resolution and rendering.
    """

    def __init__(
        self,
        param_type: str,
        value: Any,
        default_value: Any = None,
        ignored: bool = False,
    ) -> None:
        super().__init__(param_type, None if value is None else self._to_expression(value))
        self.value = value
        self.default_value = default_value
        self._ignored = ignored

    def is_default(self) -> bool:
        return self.value is None or self.value == self.default_value

    def is_ignored(self) -> bool:
        return self._ignored

    def build_code(self, indent: str) -> str:
        return "" if self.value is None else self._build_value_code(self.value)

    def _to_expression(self, value: Any) -> str:
        return str(value)

    def _build_value_code(self, value: Any) -> str:
        return str(value)


class StringParam(FixedParam):
    """String parameter rendered as a Java string literal."""

    def __init__(
        self,
        value: Optional[str],
        default_value: Optional[str] = None,
        ignored: bool = False,
    ) -> None:
        super().__init__("String", value, default_value, ignored)

    def _build_value_code(self, value: Any) -> str:
        return java_string_literal(value)


class IntParam(FixedParam):
    """Integer parameter."""

    def __init__(self, value: Optional[int], default_value: Optional[int] = None) -> None:
        super().__init__("int", value, default_value)


class LongParam(FixedParam):
    """Long parameter, suffixed with L when outside the int range."""

    INT_MAX = 2**31 - 1

    def __init__(self, value: Optional[int], default_value: Optional[int] = None) -> None:
        super().__init__("long", value, default_value)

    def _build_value_code(self, value: Any) -> str:
        return f"{value}L" if abs(value) > self.INT_MAX else str(value)


class BoolParam(FixedParam):
    """Boolean parameter."""

    def __init__(self, value: Optional[bool], default_value: Optional[bool] = None) -> None:
        super().__init__("boolean", value, default_value)

    def _to_expression(self, value: Any) -> str:
        return "true" if value else "false"

    def _build_value_code(self, value: Any) -> str:
        return self._to_expression(value)


class DurationParam(FixedParam):
    """Duration parameter rendered with the coarsest java.time.Duration factory.

    The expression of a duration is its number of whole seconds, which is
    what JMeter stores in time based properties.
    """

    def __init__(
        self,
        value: Optional[timedelta],
        default_value: Optional[timedelta] = None,
    ) -> None:
        super().__init__("Duration", value, default_value)

    def is_zero(self) -> bool:
        return self.value is not None and self.value == timedelta(0)

    def get_imports(self) -> set[str]:
        return set() if self.value is None else {DURATION_CLASS}

    def _to_expression(self, value: Any) -> str:
        return str(duration_to_seconds(value))

    def _build_value_code(self, value: Any) -> str:
        if not value:
            return "Duration.ZERO"
        millis = value // timedelta(milliseconds=1)
        if millis % 1000:
            return f"Duration.ofMillis({millis})"
        seconds = millis // 1000
        if seconds % 60:
            return f"Duration.ofSeconds({seconds})"
        minutes = seconds // 60
        if minutes % 60:
            return f"Duration.ofMinutes({minutes})"
        hours = minutes // 60
        if hours % 24:
            return f"Duration.ofHours({hours})"
        return f"Duration.ofDays({hours // 24})"


class EnumParam(FixedParam):
    """Enum constant parameter, e.g. TargetField.RESPONSE_CODE.

    Attributes:
        qualified_name: Import name of the enum type
    """

    def __init__(
        self,
        enum_type: str,
        qualified_name: str,
        value: Optional[str],
        default_value: Optional[str] = None,
    ) -> None:
        super().__init__(enum_type, value, default_value)
        self.qualified_name = qualified_name

    def get_imports(self) -> set[str]:
        return set() if self.value is None else {self.qualified_name}

    def _build_value_code(self, value: Any) -> str:
        return f"{self.param_type}.{value}"


class StringArrayParam(FixedParam):
    """Varargs of strings, rendered as comma separated literals."""

    def __init__(self, values: Optional[Sequence[str]]) -> None:
        super().__init__("String[]", list(values) if values else None)

    def _to_expression(self, value: Any) -> str:
        return ", ".join(value)

    def _build_value_code(self, value: Any) -> str:
        return ", ".join(java_string_literal(v) for v in value)


class ChildrenParam(MethodParam):
    """Varargs slot collecting the children of a builder call.

    Children are rendered one per line at the given indent, so a call
    holding children always renders as a multi-line block ending in a
    line break.
    """

    def __init__(self, param_type: str, children: Optional[list["CodeNode"]] = None) -> None:
        super().__init__(param_type, None)
        self.children: list["CodeNode"] = list(children) if children else []

    def add_child(self, child: "CodeNode") -> None:
        self.children.append(child)

    def prepend_child(self, child: "CodeNode") -> None:
        self.children.insert(0, child)

    def replace_child(self, original: "CodeNode", replacement: "CodeNode") -> None:
        for index, child in enumerate(self.children):
            if child is original:
                self.children[index] = replacement
                return
        raise InvariantViolationException(
            f"Can't replace child {original!r} since it is not part of {self.param_type} children."
        )

    def get_imports(self) -> set[str]:
        ret: set[str] = set()
        for child in self.children:
            ret.update(child.get_imports())
        return ret

    def get_static_imports(self) -> set[str]:
        ret: set[str] = set()
        for child in self.children:
            ret.update(child.get_static_imports())
        return ret

    def get_method_definitions(self) -> dict[str, "MethodCall"]:
        ret: dict[str, "MethodCall"] = {}
        for child in self.children:
            ret.update(child.get_method_definitions())
        return ret

    def build_code(self, indent: str) -> str:
        children_code = [c for c in (child.build_code(indent) for child in self.children) if c]
        if not children_code:
            return ""
        return "\n" + indent + (",\n" + indent).join(children_code) + "\n"

    def __repr__(self) -> str:
        return f"ChildrenParam({self.param_type!r}, {len(self.children)} children)"


def duration_to_seconds(value: timedelta) -> int:
    return int(value.total_seconds())


def java_string_literal(value: str) -> str:
    """Quote and escape a string as a Java string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'
