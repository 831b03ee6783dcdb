"""Builders converting JMeter test elements into DSL calls."""

from typing import Optional

from jmeter_codegen.core.builders.assertions import ResponseAssertionCodeBuilder
from jmeter_codegen.core.builders.controllers import (
    ModuleControllerCodeBuilder,
    TestFragmentCodeBuilder,
    TransactionCodeBuilder,
)
from jmeter_codegen.core.builders.http import (
    HttpDefaultsCodeBuilder,
    HttpHeadersCodeBuilder,
    HttpSamplerCodeBuilder,
)
from jmeter_codegen.core.builders.listeners import ResultsTreeVisualizerCodeBuilder
from jmeter_codegen.core.builders.test_plan import TestPlanCodeBuilder
from jmeter_codegen.core.builders.thread_group import ThreadGroupCodeBuilder
from jmeter_codegen.core.builders.timers import ConstantTimerCodeBuilder
from jmeter_codegen.core.method_call_builder import MethodCallBuilder
from jmeter_codegen.core.registry import BuilderRegistry

BUILDER_CLASSES: tuple[type[MethodCallBuilder], ...] = (
    TestPlanCodeBuilder,
    ThreadGroupCodeBuilder,
    TransactionCodeBuilder,
    TestFragmentCodeBuilder,
    ModuleControllerCodeBuilder,
    HttpSamplerCodeBuilder,
    HttpHeadersCodeBuilder,
    HttpDefaultsCodeBuilder,
    ResponseAssertionCodeBuilder,
    ConstantTimerCodeBuilder,
    ResultsTreeVisualizerCodeBuilder,
)


def default_builders(registry: Optional[BuilderRegistry] = None) -> list[MethodCallBuilder]:
    """Instantiate all builders against the given DSL surface."""
    return [builder_class(registry) for builder_class in BUILDER_CLASSES]


__all__ = [
    "BUILDER_CLASSES",
    "default_builders",
    "ConstantTimerCodeBuilder",
    "HttpDefaultsCodeBuilder",
    "HttpHeadersCodeBuilder",
    "HttpSamplerCodeBuilder",
    "ModuleControllerCodeBuilder",
    "ResponseAssertionCodeBuilder",
    "ResultsTreeVisualizerCodeBuilder",
    "TestFragmentCodeBuilder",
    "TestPlanCodeBuilder",
    "ThreadGroupCodeBuilder",
    "TransactionCodeBuilder",
]
