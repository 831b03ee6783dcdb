"""Base classes for converting test elements into DSL builder calls.

Each MethodCallBuilder handles one kind of JMeter test element. The
generator asks every registered builder whether it matches the element in
the current MethodCallContext, and the first match builds the call.
"""

from typing import Optional

from jmeter_codegen.core.code_segment import CodeNode
from jmeter_codegen.core.method_call import MethodCall
from jmeter_codegen.core.params import MethodParam
from jmeter_codegen.core.registry import BuilderRegistry, default_registry
from jmeter_codegen.core.test_element import TestElement
from jmeter_codegen.exceptions import UnsupportedMappingException

DSL_FACTORY_TYPE = "JmeterDsl"


class MethodCallContext:
    """Position of a test element in the plan being converted.

    Attributes:
        test_element: Element to convert
        parent: Context of the parent element, None for the test plan
        method_call: Call built for the element, once built
        detached: Set by builders whose call must not be added to the parent
            (e.g. calls moved into method definitions)
    """

    def __init__(
        self,
        test_element: TestElement,
        parent: Optional["MethodCallContext"] = None,
    ) -> None:
        self.test_element = test_element
        self.parent = parent
        self.method_call: Optional[CodeNode] = None
        self.detached = False

    def root(self) -> "MethodCallContext":
        ret = self
        while ret.parent is not None:
            ret = ret.parent
        return ret

    def child(self, test_element: TestElement) -> "MethodCallContext":
        return MethodCallContext(test_element, self)


class MethodCallBuilder:
    """Converts one kind of test element into a DSL builder call.

    Subclasses list the DSL factory methods they may use in
    builder_methods; build_call picks the overload accepting the given
    params.
    """

    builder_methods: tuple[str, ...] = ()

    def __init__(self, registry: Optional[BuilderRegistry] = None) -> None:
        self.registry = registry if registry is not None else default_registry()
        factory = self.registry.get_type(DSL_FACTORY_TYPE)
        self._methods = [
            m
            for m in (factory.methods if factory else [])
            if m.static and m.is_public and m.name in self.builder_methods
        ]

    def matches(self, context: MethodCallContext) -> bool:
        raise NotImplementedError

    def build_method_call(self, context: MethodCallContext) -> CodeNode:
        raise NotImplementedError

    def build_call(self, *params: MethodParam) -> MethodCall:
        """Call the builder method overload accepting the given params.

        Raises:
            UnsupportedMappingException: If no builder method accepts the params
        """
        method = self.registry.find_params_matching_method(self._methods, params)
        if method is None:
            raise UnsupportedMappingException(
                "|".join(self.builder_methods), DSL_FACTORY_TYPE, params
            )
        return MethodCall.from_builder_method(method, *params, registry=self.registry)


class SingleTestElementCallBuilder(MethodCallBuilder):
    """Builder matching elements by JMeter test class and, optionally, GUI class."""

    test_class: str = ""
    gui_class: Optional[str] = None

    def matches(self, context: MethodCallContext) -> bool:
        element = context.test_element
        return element.test_class == self.test_class and (
            self.gui_class is None or element.gui_class == self.gui_class
        )
