"""Tests for the test element model and its param builder."""

from datetime import timedelta

from jmeter_codegen.core.params import BoolParam, DurationParam, IntParam, LongParam, StringParam
from jmeter_codegen.core.test_element import TestElement, TestElementParamBuilder


def sampler(**properties) -> TestElement:
    ret = TestElement("HTTPSamplerProxy", "Request", "HttpTestSampleGui")
    for name, value in properties.items():
        ret.set_property(name, value)
    return ret


class TestTestElement:
    """Tests for property access."""

    def test_nested_property_path(self):
        loop = TestElement("LoopController")
        loop.set_property("LoopController.loops", 3)
        element = TestElement("ThreadGroup")
        element.set_property("ThreadGroup.main_controller", loop)

        assert element.get_property_as_string("ThreadGroup.main_controller/LoopController.loops") == "3"
        assert element.get_property("ThreadGroup.main_controller/missing") is None
        assert element.get_property("ThreadGroup.main_controller/LoopController.loops/deeper") is None

    def test_set_property_stores_text(self):
        element = sampler(flag=True, count=5)

        assert element.properties == {"flag": "true", "count": "5"}

    def test_string_of_non_scalar_is_default(self):
        element = sampler(args=["a"], nested=TestElement("Arguments"))

        assert element.get_property_as_string("args", "none") == "none"
        assert element.get_property_as_string("nested") == ""

    def test_bool_property(self):
        element = sampler(on=" TRUE ", off="false", blank="")

        assert element.get_property_as_bool("on")
        assert not element.get_property_as_bool("off", True)
        assert element.get_property_as_bool("blank", True)
        assert not element.get_property_as_bool("missing")

    def test_collection(self):
        element = sampler(items=["a", "b"], text="a")

        assert element.get_collection("items") == ["a", "b"]
        assert element.get_collection("text") == []
        assert not element.has_property("items/x")


class TestTestElementParamBuilder:
    """Tests for params built from element properties."""

    def test_default_name_is_ignored(self):
        params = TestElementParamBuilder(TestElement("ThreadGroup", "Thread Group"))

        param = params.name_param("Thread Group")

        assert param.is_ignored()
        assert param.value == "Thread Group"

    def test_custom_name_is_kept(self):
        param = TestElementParamBuilder(TestElement("ThreadGroup", "Users")).name_param("Thread Group")

        assert not param.is_ignored()

    def test_empty_name_uses_default(self):
        param = TestElementParamBuilder(TestElement("ThreadGroup")).name_param("Thread Group")

        assert param.value == "Thread Group"
        assert param.is_ignored()

    def test_string_param(self):
        params = TestElementParamBuilder(sampler(method="POST", empty=""))

        assert params.string_param("method", "GET").value == "POST"
        assert params.string_param("empty", "GET").is_default()

    def test_int_param(self):
        params = TestElementParamBuilder(sampler(threads=" 10 ", blank=""))

        assert params.int_param("threads").value == 10
        assert params.int_param("blank", -1).value == -1
        assert params.int_param("blank", -1).is_default()

    def test_expression_becomes_string_param(self):
        params = TestElementParamBuilder(sampler(threads="${__P(threads,1)}"))

        param = params.int_param("threads")

        assert isinstance(param, StringParam)
        assert param.value == "${__P(threads,1)}"

    def test_long_param(self):
        params = TestElementParamBuilder(sampler(size="5000000000", bad="x"))

        assert isinstance(params.long_param("size"), LongParam)
        assert params.long_param("size").value == 5000000000
        assert isinstance(params.long_param("bad"), StringParam)

    def test_bool_param(self):
        params = TestElementParamBuilder(sampler(on="True", expr="${flag}"))

        assert params.bool_param("on").value is True
        assert isinstance(params.bool_param("expr"), StringParam)
        missing = params.bool_param("missing", True)
        assert isinstance(missing, BoolParam) and missing.is_default()

    def test_duration_param_units(self):
        params = TestElementParamBuilder(sampler(delay="1500", ramp="30"))

        millis = params.duration_param("delay", unit=timedelta(milliseconds=1))
        secs = params.duration_param("ramp", timedelta(seconds=1))

        assert millis.value == timedelta(milliseconds=1500)
        assert isinstance(secs, DurationParam) and secs.value == timedelta(seconds=30)

    def test_prefix(self):
        loop = TestElement("LoopController")
        loop.set_property("LoopController.loops", "4")
        element = TestElement("ThreadGroup")
        element.set_property("ThreadGroup.main_controller", loop)

        params = TestElementParamBuilder(element, "ThreadGroup.main_controller/")

        assert isinstance(params.int_param("LoopController.loops"), IntParam)
        assert params.int_param("LoopController.loops").value == 4

    def test_enum_param(self):
        params = TestElementParamBuilder(sampler(field="Assertion.response_code"))
        constants = {"Assertion.response_code": "RESPONSE_CODE"}

        param = params.enum_param("field", "TargetField", "a.TargetField", constants, "RESPONSE_BODY")
        missing = params.enum_param("other", "TargetField", "a.TargetField", constants, "RESPONSE_BODY")

        assert param.build_code("") == "TargetField.RESPONSE_CODE"
        assert missing.is_default()
