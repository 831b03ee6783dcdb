"""Conversion of listeners."""

from jmeter_codegen.core.method_call import MethodCall
from jmeter_codegen.core.method_call_builder import MethodCallContext, SingleTestElementCallBuilder


class ResultsTreeVisualizerCodeBuilder(SingleTestElementCallBuilder):
    """Converts a View Results Tree listener into resultsTreeVisualizer()."""

    test_class = "ResultCollector"
    gui_class = "ViewResultsFullVisualizer"
    builder_methods = ("resultsTreeVisualizer",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        return self.build_call()
