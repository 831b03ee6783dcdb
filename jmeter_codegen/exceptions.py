"""Custom exceptions for JMeter DSL Code Generator.

This module defines the exception hierarchy for the code generator.
All custom exceptions inherit from CodegenException base class.
"""

from typing import Any, Sequence


class CodegenException(Exception):
    """Base exception for all code generator errors.

    All custom exceptions in the code generator inherit from this
    base class to allow catching all tool-specific errors.
    """

    pass


class UnsupportedMappingException(CodegenException):
    """Raised when no builder method matches a requested call.

    This exception is raised when:
    - A chained method name/parameter shape has no match in the type ancestry
    - A static factory method is missing or ambiguous
    - A builder type is not registered in the DSL surface

    It signals that the generator's model of the DSL has drifted from the
    real DSL API, so it is never retried.

    Attributes:
        method_name: Name of the method that could not be resolved
        target_type: Builder type the method was looked up on
        params: Parameters supplied for the call
    """

    def __init__(
        self,
        method_name: str,
        target_type: str,
        params: Sequence[Any] = (),
        reason: str = "",
    ) -> None:
        """Initialize with the failed lookup details.

        Args:
            method_name: The method that was looked up
            target_type: The type the method was looked up on
            params: Parameters that were supplied
            reason: Optional extra detail appended to the message
        """
        self.method_name = method_name
        self.target_type = target_type
        self.params = list(params)
        message = (
            f"No public '{method_name}' method in {target_type} was found for "
            f"parameters {self.params}. This is probably due to some change in "
            f"DSL not reflected in associated code builder."
        )
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class InvariantViolationException(CodegenException):
    """Raised when the call tree is asked for an impossible operation.

    This exception is raised when:
    - A builder type exposes no children method anywhere in its ancestry
    - A child to replace is not part of the children slot
    """

    pass


class JMXParseException(CodegenException):
    """Raised when JMX file parsing fails.

    This exception is raised when:
    - JMX file does not exist
    - XML is malformed
    - Root element is not jmeterTestPlan
    """

    pass


class SettingsException(CodegenException):
    """Raised when generator settings are invalid.

    This exception is raised when:
    - Settings file has invalid YAML syntax
    - Settings file contains unknown keys
    - A setting value has the wrong type
    """

    pass
