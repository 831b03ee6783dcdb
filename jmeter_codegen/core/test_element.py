"""Property bag model of JMeter test plan elements.

A TestElement mirrors an element of a JMX file: its class, name, enabled
flag, its properties and the child elements of its hashTree. Nested
elementProp values are TestElements themselves and collectionProp values
are lists, so properties can be read with "/" separated paths such as
"ThreadGroup.main_controller/LoopController.loops".
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

from jmeter_codegen.core.params import (
    BoolParam,
    DurationParam,
    EnumParam,
    IntParam,
    LongParam,
    MethodParam,
    StringParam,
)

PATH_SEPARATOR = "/"


@dataclass
class TestElement:
    """A JMeter test element read from a test plan.

    Attributes:
        test_class: JMeter test class (e.g. "ThreadGroup", "HTTPSamplerProxy")
        name: Element name as shown in JMeter GUI
        gui_class: JMeter GUI class (e.g. "ThreadGroupGui")
        enabled: Whether element is enabled in the plan
        properties: Property name -> string, nested TestElement or list
        children: Child elements (the element's hashTree)
    """

    __test__ = False

    test_class: str
    name: str = ""
    gui_class: str = ""
    enabled: bool = True
    properties: dict[str, Any] = field(default_factory=dict)
    children: list["TestElement"] = field(default_factory=list)

    def get_property(self, path: str) -> Any:
        """Get a raw property value, None when missing."""
        current: Any = self
        for name in path.split(PATH_SEPARATOR):
            if not isinstance(current, TestElement):
                return None
            current = current.properties.get(name)
        return current

    def has_property(self, path: str) -> bool:
        return self.get_property(path) is not None

    def get_property_as_string(self, path: str, default: str = "") -> str:
        value = self.get_property(path)
        if value is None or isinstance(value, (TestElement, list)):
            return default
        return str(value)

    def get_property_as_bool(self, path: str, default: bool = False) -> bool:
        value = self.get_property_as_string(path).strip()
        return value.lower() == "true" if value else default

    def get_collection(self, path: str) -> list[Any]:
        value = self.get_property(path)
        return value if isinstance(value, list) else []

    def set_property(self, name: str, value: Any) -> None:
        """Set a property, storing scalars in their JMX textual form."""
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif value is not None and not isinstance(value, (TestElement, list, str)):
            value = str(value)
        self.properties[name] = value


class TestElementParamBuilder:
    """Build method params from the properties of a test element.

    Numeric properties holding JMeter expressions (e.g. "${__P(threads)}")
    can't be parsed, so they are returned as symbolic StringParams and
    builders pick the String overloads of DSL methods for them.

    Example:
        >>> params = TestElementParamBuilder(thread_group)
        >>> params.int_param("ThreadGroup.num_threads")
        IntParam('10')
    """

    __test__ = False

    def __init__(self, element: TestElement, prefix: str = "") -> None:
        self.element = element
        self.prefix = prefix

    def _value(self, prop: str) -> str:
        return self.element.get_property_as_string(self.prefix + prop).strip()

    def name_param(self, default_name: str) -> StringParam:
        """Element name, ignored when it is the default one of the DSL builder."""
        name = self.element.name or default_name
        return StringParam(name, default_name, ignored=name == default_name)

    def string_param(self, prop: str, default: Optional[str] = None) -> StringParam:
        value = self.element.get_property_as_string(self.prefix + prop)
        return StringParam(value if value else default, default)

    def int_param(self, prop: str, default: Optional[int] = None) -> MethodParam:
        value = self._value(prop)
        if not value:
            return IntParam(default, default)
        try:
            return IntParam(int(value), default)
        except ValueError:
            return StringParam(value)

    def long_param(self, prop: str, default: Optional[int] = None) -> MethodParam:
        value = self._value(prop)
        if not value:
            return LongParam(default, default)
        try:
            return LongParam(int(value), default)
        except ValueError:
            return StringParam(value)

    def bool_param(self, prop: str, default: bool = False) -> MethodParam:
        value = self._value(prop).lower()
        if not value:
            return BoolParam(default, default)
        if value not in ("true", "false"):
            return StringParam(value)
        return BoolParam(value == "true", default)

    def duration_param(
        self,
        prop: str,
        default: Optional[timedelta] = None,
        unit: timedelta = timedelta(seconds=1),
    ) -> MethodParam:
        """Duration stored as a number of units (seconds by default)."""
        value = self._value(prop)
        if not value:
            return DurationParam(default, default)
        try:
            return DurationParam(unit * int(value), default)
        except ValueError:
            return StringParam(value)

    def enum_param(
        self,
        prop: str,
        enum_type: str,
        qualified_name: str,
        constants: dict[str, str],
        default: Optional[str] = None,
    ) -> EnumParam:
        """Enum constant mapped from the property value."""
        value = constants.get(self._value(prop), default)
        return EnumParam(enum_type, qualified_name, value, default)
