"""JMeter DSL Code Generator - Convert JMeter test plans into jmeter-java-dsl code."""

__version__ = "1.0.0"

from jmeter_codegen.core.builders.thread_group import Stage, reconstruct_thread_group
from jmeter_codegen.core.generator import ConversionResult, DslCodeGenerator
from jmeter_codegen.core.jmx_reader import JMXReader

__all__ = [
    "DslCodeGenerator",
    "ConversionResult",
    "JMXReader",
    "Stage",
    "reconstruct_thread_group",
]
