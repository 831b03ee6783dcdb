"""Conversion of HTTP samplers, headers and defaults."""

import logging

from jmeter_codegen.core.method_call import MethodCall
from jmeter_codegen.core.method_call_builder import MethodCallContext, SingleTestElementCallBuilder
from jmeter_codegen.core.params import StringParam
from jmeter_codegen.core.test_element import TestElement, TestElementParamBuilder

logger = logging.getLogger(__name__)

PROTOCOL = "HTTPSampler.protocol"
DOMAIN = "HTTPSampler.domain"
PORT = "HTTPSampler.port"
PATH = "HTTPSampler.path"
METHOD = "HTTPSampler.method"
FOLLOW_REDIRECTS = "HTTPSampler.follow_redirects"
POST_BODY_RAW = "HTTPSampler.postBodyRaw"
ARGUMENTS = "HTTPsampler.Arguments"
ARGUMENT_LIST = "Arguments.arguments"
ARGUMENT_NAME = "Argument.name"
ARGUMENT_VALUE = "Argument.value"
HEADERS = "HeaderManager.headers"
HEADER_NAME = "Header.name"
HEADER_VALUE = "Header.value"

DEFAULT_PORTS = {"http": "80", "https": "443"}


def build_url(element: TestElement) -> str:
    """Build the URL configured in an HTTP sampler or defaults element.

    Protocol defaults to http, and the port is omitted when it is the
    default one of the protocol. Elements without domain only keep the path,
    which is relative to the configured defaults.
    """
    protocol = element.get_property_as_string(PROTOCOL).strip() or "http"
    domain = element.get_property_as_string(DOMAIN).strip()
    port = element.get_property_as_string(PORT).strip()
    path = element.get_property_as_string(PATH).strip()
    if not domain:
        return path
    ret = f"{protocol}://{domain}"
    if port and DEFAULT_PORTS.get(protocol.lower()) != port:
        ret += f":{port}"
    if path and not path.startswith("/"):
        path = "/" + path
    return ret + path


def _arguments(element: TestElement) -> list[TestElement]:
    return [
        arg
        for arg in element.get_collection(ARGUMENTS + "/" + ARGUMENT_LIST)
        if isinstance(arg, TestElement)
    ]


class HttpSamplerCodeBuilder(SingleTestElementCallBuilder):
    """Converts an HTTPSamplerProxy into httpSampler(...) with method, body and params."""

    test_class = "HTTPSamplerProxy"
    builder_methods = ("httpSampler",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        element = context.test_element
        params = TestElementParamBuilder(element)
        ret = self.build_call(params.name_param("HTTP Request"), StringParam(build_url(element)))
        ret.chain("method", params.string_param(METHOD, "GET"))
        arguments = _arguments(element)
        if element.get_property_as_bool(POST_BODY_RAW):
            body = "".join(arg.get_property_as_string(ARGUMENT_VALUE) for arg in arguments)
            ret.chain("body", StringParam(body, ""))
        else:
            for arg in arguments:
                ret.chain(
                    "param",
                    StringParam(arg.get_property_as_string(ARGUMENT_NAME)),
                    StringParam(arg.get_property_as_string(ARGUMENT_VALUE)),
                )
        ret.chain("followRedirects", params.bool_param(FOLLOW_REDIRECTS, True))
        return ret


class HttpHeadersCodeBuilder(SingleTestElementCallBuilder):
    """Converts a HeaderManager into httpHeaders() with one header call per entry."""

    test_class = "HeaderManager"
    builder_methods = ("httpHeaders",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        ret = self.build_call()
        for header in context.test_element.get_collection(HEADERS):
            if not isinstance(header, TestElement):
                continue
            ret.chain(
                "header",
                StringParam(header.get_property_as_string(HEADER_NAME)),
                StringParam(header.get_property_as_string(HEADER_VALUE)),
            )
        return ret


class HttpDefaultsCodeBuilder(SingleTestElementCallBuilder):
    """Converts HTTP request defaults into httpDefaults().url(...)."""

    test_class = "ConfigTestElement"
    gui_class = "HttpDefaultsGui"
    builder_methods = ("httpDefaults",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        url = build_url(context.test_element)
        ret = self.build_call()
        if url:
            ret.chain("url", StringParam(url))
        else:
            logger.debug("HTTP defaults %r define no URL", context.test_element.name)
        return ret
