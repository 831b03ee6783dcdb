"""Core modules for JMeter DSL Code Generator."""

from jmeter_codegen.core.builders.thread_group import (
    SimpleThreadGroupHelper,
    Stage,
    ThreadGroupConfig,
    reconstruct_thread_group,
    sum_durations,
)
from jmeter_codegen.core.generator import ConversionResult, DslCodeGenerator
from jmeter_codegen.core.jmx_reader import JMXReader
from jmeter_codegen.core.method_call import EMPTY_CALL, MethodCall
from jmeter_codegen.core.registry import BuilderRegistry, default_registry
from jmeter_codegen.core.settings import GeneratorSettings, load_settings
from jmeter_codegen.core.test_element import TestElement

__all__ = [
    "BuilderRegistry",
    "ConversionResult",
    "DslCodeGenerator",
    "EMPTY_CALL",
    "GeneratorSettings",
    "JMXReader",
    "MethodCall",
    "SimpleThreadGroupHelper",
    "Stage",
    "TestElement",
    "ThreadGroupConfig",
    "default_registry",
    "load_settings",
    "reconstruct_thread_group",
    "sum_durations",
]
