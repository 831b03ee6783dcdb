"""Conversion of response assertions."""

from jmeter_codegen.core.method_call import MethodCall
from jmeter_codegen.core.method_call_builder import MethodCallContext, SingleTestElementCallBuilder
from jmeter_codegen.core.params import StringArrayParam
from jmeter_codegen.core.test_element import TestElement, TestElementParamBuilder

TEST_FIELD = "Assertion.test_field"
TEST_TYPE = "Assertion.test_type"
ASSUME_SUCCESS = "Assertion.assume_success"
# JMeter persists test strings with this misspelled name
TEST_STRINGS = "Asserion.test_strings"

TARGET_FIELD_TYPE = "TargetField"
TARGET_FIELD_CLASS = "us.abstracta.jmeter.javadsl.core.assertions.DslResponseAssertion.TargetField"
TARGET_FIELDS = {
    "Assertion.response_data": "RESPONSE_BODY",
    "Assertion.response_code": "RESPONSE_CODE",
    "Assertion.response_message": "RESPONSE_MESSAGE",
    "Assertion.response_headers": "RESPONSE_HEADERS",
    "Assertion.request_headers": "REQUEST_HEADERS",
    "Assertion.sample_label": "REQUEST_URL",
    "Assertion.request_data": "REQUEST_BODY",
    "Assertion.response_data_as_document": "RESPONSE_BODY_AS_DOCUMENT",
}

MATCH = 1
CONTAINS = 1 << 1
NOT = 1 << 2
EQUALS = 1 << 3
SUBSTRING = 1 << 4
OR = 1 << 5


def _check_method(test_type: int) -> str:
    if test_type & SUBSTRING:
        return "containsSubstrings"
    if test_type & EQUALS:
        return "equalsToStrings"
    if test_type & MATCH:
        return "matchesRegexes"
    return "containsRegexes"


class ResponseAssertionCodeBuilder(SingleTestElementCallBuilder):
    """Converts a ResponseAssertion into responseAssertion() with its checks.

    The JMeter test type is a bit mask combining the kind of check
    (substring, equals, match or contains) with the NOT and OR modifiers.
    """

    test_class = "ResponseAssertion"
    builder_methods = ("responseAssertion",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        element = context.test_element
        params = TestElementParamBuilder(element)
        ret = self.build_call(params.name_param("Response Assertion"))
        ret.chain(
            "fieldToTest",
            params.enum_param(
                TEST_FIELD, TARGET_FIELD_TYPE, TARGET_FIELD_CLASS, TARGET_FIELDS, "RESPONSE_BODY"
            ),
        )
        ret.chain("ignoreStatus", params.bool_param(ASSUME_SUCCESS))
        try:
            test_type = int(element.get_property_as_string(TEST_TYPE, "2").strip() or "2")
        except ValueError:
            test_type = CONTAINS
        strings = [
            str(value)
            for value in element.get_collection(TEST_STRINGS)
            if not isinstance(value, (list, TestElement))
        ]
        if strings:
            ret.chain(_check_method(test_type), StringArrayParam(strings))
        if test_type & NOT:
            ret.chain("invertCheck")
        if test_type & OR:
            ret.chain("anyMatch")
        return ret
