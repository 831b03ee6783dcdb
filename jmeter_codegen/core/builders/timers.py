"""Conversion of timers."""

from datetime import timedelta

from jmeter_codegen.core.method_call import MethodCall
from jmeter_codegen.core.method_call_builder import MethodCallContext, SingleTestElementCallBuilder
from jmeter_codegen.core.test_element import TestElementParamBuilder

DELAY = "ConstantTimer.delay"


class ConstantTimerCodeBuilder(SingleTestElementCallBuilder):
    """Converts a ConstantTimer (delay in millis) into constantTimer(...)."""

    test_class = "ConstantTimer"
    builder_methods = ("constantTimer",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        params = TestElementParamBuilder(context.test_element)
        return self.build_call(
            params.duration_param(DELAY, timedelta(0), unit=timedelta(milliseconds=1))
        )
