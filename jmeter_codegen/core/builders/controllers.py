"""Conversion of logic controllers: transactions, test fragments and module controllers.

Test fragments placed directly in the test plan are not part of the load
but reusable blocks, so they are generated as methods of the test class
and module controllers referencing them become calls to those methods.
"""

import logging
import re

from jmeter_codegen.core.code_segment import CodeNode
from jmeter_codegen.core.method_call import EMPTY_CALL, MethodCall
from jmeter_codegen.core.method_call_builder import MethodCallContext, SingleTestElementCallBuilder
from jmeter_codegen.core.params import ChildrenParam, StringParam
from jmeter_codegen.core.test_element import TestElementParamBuilder

logger = logging.getLogger(__name__)

GENERATE_PARENT_SAMPLE = "TransactionController.parent"
NODE_PATH = "ModuleController.node_path"
FRAGMENT_TYPE = "DslTestFragmentController"

WORD_PATTERN = re.compile(r"[A-Za-z0-9]+")


def fragment_method_name(name: str) -> str:
    """Java method name for a fragment, e.g. "Login flow" -> "loginFlow"."""
    words = WORD_PATTERN.findall(name)
    if not words:
        return "fragment"
    ret = words[0][:1].lower() + words[0][1:] + "".join(w[:1].upper() + w[1:] for w in words[1:])
    return "fragment" + ret[:1].upper() + ret[1:] if ret[0].isdigit() else ret


class TransactionCodeBuilder(SingleTestElementCallBuilder):
    """Converts a TransactionController into transaction(name, ...)."""

    test_class = "TransactionController"
    builder_methods = ("transaction",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        element = context.test_element
        params = TestElementParamBuilder(element)
        return self.build_call(
            StringParam(element.name or "Transaction Controller"),
            ChildrenParam("ThreadGroupChild[]"),
        ).chain("generateParentSample", params.bool_param(GENERATE_PARENT_SAMPLE))


class TestFragmentCodeBuilder(SingleTestElementCallBuilder):
    """Converts a TestFragmentController into fragment(...).

    Fragments that are direct children of the test plan are moved into a
    method definition registered on the test plan call.
    """

    __test__ = False

    test_class = "TestFragmentController"
    builder_methods = ("fragment",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        params = TestElementParamBuilder(context.test_element)
        ret = self.build_call(
            params.name_param("Test Fragment"), ChildrenParam("ThreadGroupChild[]")
        )
        root = context.root()
        if context.parent is root and isinstance(root.method_call, MethodCall):
            root.method_call.add_method_definition(
                fragment_method_name(context.test_element.name), ret
            )
            context.detached = True
        return ret


class ModuleControllerCodeBuilder(SingleTestElementCallBuilder):
    """Converts a ModuleController into a call to the referenced fragment method."""

    test_class = "ModuleController"

    def build_method_call(self, context: MethodCallContext) -> CodeNode:
        node_path = [
            str(node) for node in context.test_element.get_collection(NODE_PATH) if isinstance(node, str)
        ]
        if not node_path:
            logger.warning(
                "Module controller %r references no element, skipping it",
                context.test_element.name,
            )
            return EMPTY_CALL
        return MethodCall(fragment_method_name(node_path[-1]), FRAGMENT_TYPE, registry=self.registry)
