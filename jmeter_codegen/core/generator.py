"""Java DSL code generator for JMeter test plans.

This module walks a TestElement tree top-down, asks the first matching
builder of each element for its DSL call, attaches children calls to
their parent call, and finally renders the whole call tree as a JUnit 5
test class.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jmeter_codegen.core.builders import default_builders
from jmeter_codegen.core.code_segment import INDENT, CodeNode
from jmeter_codegen.core.jmx_reader import JMXReader
from jmeter_codegen.core.method_call import EMPTY_CALL, EmptyCall, MethodCall
from jmeter_codegen.core.method_call_builder import MethodCallBuilder, MethodCallContext
from jmeter_codegen.core.registry import BuilderRegistry, default_registry
from jmeter_codegen.core.settings import GeneratorSettings
from jmeter_codegen.core.test_element import TestElement
from jmeter_codegen.exceptions import CodegenException

logger = logging.getLogger(__name__)

TEST_ANNOTATION_CLASS = "org.junit.jupiter.api.Test"
IO_EXCEPTION_CLASS = "java.io.IOException"


@dataclass
class ConversionResult:
    """Result of converting a test plan into DSL code.

    Attributes:
        code: Generated Java test class
        warnings: Messages about elements that couldn't be converted
        imports: Classes imported by the generated class
        static_imports: Classes whose static members are imported
        elements_converted: Number of elements converted into DSL calls
    """

    code: str
    warnings: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    static_imports: list[str] = field(default_factory=list)
    elements_converted: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "warnings": self.warnings,
            "imports": self.imports,
            "static_imports": self.static_imports,
            "elements_converted": self.elements_converted,
        }


@dataclass
class _Conversion:
    warnings: list[str] = field(default_factory=list)
    elements_converted: int = 0


class DslCodeGenerator:
    """Generate jmeter-java-dsl test classes from JMeter test plans.

    Example:
        >>> generator = DslCodeGenerator()
        >>> result = generator.generate_from_file("load-test.jmx")
        >>> print(result.code)
    """

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        registry: Optional[BuilderRegistry] = None,
        builders: Optional[Sequence[MethodCallBuilder]] = None,
    ) -> None:
        self.settings = settings if settings is not None else GeneratorSettings()
        self.registry = registry if registry is not None else default_registry()
        self.builders = list(builders) if builders is not None else default_builders(self.registry)

    def generate_from_file(self, jmx_path: Union[str, Path]) -> ConversionResult:
        """Generate a test class from a JMX file.

        Raises:
            JMXParseException: If the file can't be read as a JMeter test plan
            CodegenException: If the plan can't be converted
        """
        return self.generate(JMXReader().read(jmx_path))

    def generate(self, plan: TestElement) -> ConversionResult:
        """Generate a test class from a test plan element.

        Args:
            plan: Root element of the test plan (usually a TestPlan)

        Returns:
            ConversionResult with generated code and conversion details

        Raises:
            CodegenException: If the root element can't be converted, or any
                builder fails to resolve a DSL method
        """
        conversion = _Conversion()
        root = self.build_call_tree(plan, conversion)
        static_imports = sorted(root.get_static_imports())
        imports = sorted(root.get_imports() | self._test_imports())
        code = self._build_class_code(root, imports, static_imports)
        logger.info(
            "Converted %d elements of %r with %d warnings",
            conversion.elements_converted,
            plan.name,
            len(conversion.warnings),
        )
        return ConversionResult(
            code=code,
            warnings=conversion.warnings,
            imports=imports,
            static_imports=static_imports,
            elements_converted=conversion.elements_converted,
        )

    def build_call_tree(self, plan: TestElement, conversion: Optional[_Conversion] = None) -> MethodCall:
        """Convert the test plan into its root DSL call."""
        ret = self._build_node(MethodCallContext(plan), conversion or _Conversion())
        if not isinstance(ret, MethodCall):
            raise CodegenException(
                f"Test plan root '{plan.name}' ({plan.test_class}) can't be converted to DSL code"
            )
        return ret

    def _find_builder(self, context: MethodCallContext) -> Optional[MethodCallBuilder]:
        for builder in self.builders:
            if builder.matches(context):
                return builder
        return None

    def _build_node(self, context: MethodCallContext, conversion: _Conversion) -> CodeNode:
        element = context.test_element
        builder = self._find_builder(context)
        if builder is None:
            element_type = f"{element.test_class}/{element.gui_class}" if element.gui_class else element.test_class
            warning = f"Unsupported element '{element.name}' ({element_type}) was skipped"
            logger.warning(warning)
            conversion.warnings.append(warning)
            return EMPTY_CALL

        ret = builder.build_method_call(context)
        context.method_call = ret
        if not element.enabled and not context.detached:
            if not self.settings.comment_disabled:
                logger.debug("Dropping disabled element %r", element.name)
                return EMPTY_CALL
            ret.set_commented(True)
        conversion.elements_converted += 1

        for child in element.children:
            child_context = context.child(child)
            child_call = self._build_node(child_context, conversion)
            if not child_context.detached and not isinstance(child_call, EmptyCall):
                ret.child(child_call)
        return ret

    def _test_imports(self) -> set[str]:
        ret = {TEST_ANNOTATION_CLASS}
        if self.settings.include_run:
            ret.add(IO_EXCEPTION_CLASS)
        return ret

    def _build_class_code(
        self, root: MethodCall, imports: list[str], static_imports: list[str]
    ) -> str:
        lines = [f"import static {name}.*;" for name in static_imports]
        if lines:
            lines.append("")
        lines.extend(f"import {name};" for name in imports)
        lines.append("")
        lines.append(f"public class {self.settings.class_name} {{")
        lines.append("")

        method_indent = INDENT * 2
        for name, definition in root.get_method_definitions().items():
            lines.append(f"{INDENT}private {definition.target_type} {name}() {{")
            lines.append(f"{method_indent}return {definition.build_assignment_code(method_indent + INDENT)};")
            lines.append(f"{INDENT}}}")
            lines.append("")

        throws = " throws IOException" if self.settings.include_run else ""
        run = ".run()" if self.settings.include_run else ""
        lines.append(f"{INDENT}@Test")
        lines.append(f"{INDENT}public void {self.settings.test_method_name}(){throws} {{")
        lines.append(f"{method_indent}{root.build_code(method_indent)}{run};")
        lines.append(f"{INDENT}}}")
        lines.append("")
        lines.append("}")
        return "\n".join(lines) + "\n"
