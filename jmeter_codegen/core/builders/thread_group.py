"""Thread group reconstruction and conversion.

Load profiles are described as a list of stages (thread count, duration
and iterations). SimpleThreadGroupHelper reduces up to three stages into
the settings of a plain JMeter ThreadGroup, and ThreadGroupCodeBuilder
converts such a ThreadGroup into the simplest equivalent threadGroup(...)
DSL expression.

Stage values may be symbolic JMeter expressions (e.g. "${__P(RAMP)}"). In
that case durations can't be added at generation time, so the sum is
delegated to a groovy function evaluated when the test plan runs.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence, Union

from jmeter_codegen.core.code_segment import CodeNode
from jmeter_codegen.core.method_call import MethodCall
from jmeter_codegen.core.method_call_builder import (
    MethodCallContext,
    SingleTestElementCallBuilder,
)
from jmeter_codegen.core.params import (
    ChildrenParam,
    DurationParam,
    IntParam,
    MethodParam,
    StringParam,
    duration_to_seconds,
)
from jmeter_codegen.core.registry import BuilderRegistry
from jmeter_codegen.core.test_element import PATH_SEPARATOR, TestElement, TestElementParamBuilder

NUM_THREADS = "ThreadGroup.num_threads"
RAMP_TIME = "ThreadGroup.ramp_time"
DURATION = "ThreadGroup.duration"
DELAY = "ThreadGroup.delay"
SCHEDULER = "ThreadGroup.scheduler"
MAIN_CONTROLLER = "ThreadGroup.main_controller"
SAME_USER_ON_NEXT_ITERATION = "ThreadGroup.same_user_on_next_iteration"
LOOPS = "LoopController.loops"
CONTINUE_FOREVER = "LoopController.continue_forever"

DEFAULT_NAME = "Thread Group"

DurationValue = Union[timedelta, str]
CountValue = Union[int, str]


@dataclass(frozen=True)
class Stage:
    """One segment of a load profile.

    Attributes:
        thread_count: Threads to reach in the stage, 0 for a pure delay
        duration: Time the stage lasts, None when driven by iterations
        iterations: Iterations per thread, None when driven by time
    """

    thread_count: CountValue
    duration: Optional[DurationValue] = None
    iterations: Optional[CountValue] = None

    def is_delay(self) -> bool:
        return self.thread_count == 0

    @classmethod
    def from_values(
        cls,
        thread_count: Union[int, float, str],
        duration: Union[int, float, str, None] = None,
        iterations: Union[int, float, str, None] = None,
    ) -> "Stage":
        """Create a stage from plain values, e.g. parsed from CLI or JSON.

        Numeric text becomes int (or seconds for durations), empty text
        becomes None and any other text is kept as a JMeter expression.
        Numbers must be whole, so 5.0 is accepted and 1.5 is not.

        Raises:
            ValueError: If threads are missing or a number is fractional
        """
        count = _parse_count(thread_count)
        if count is None:
            raise ValueError("Stage thread count is required")
        if isinstance(duration, str):
            duration = duration.strip()
            seconds = _parse_count(duration)
            duration_value: Optional[DurationValue] = (
                timedelta(seconds=seconds) if isinstance(seconds, int) else (duration or None)
            )
        elif duration is None:
            duration_value = None
        else:
            duration_value = timedelta(seconds=_whole_number(duration))
        return cls(count, duration_value, _parse_count(iterations))


@dataclass
class ThreadGroupConfig:
    """Settings of a plain JMeter thread group."""

    threads: CountValue = 1
    iterations: Optional[CountValue] = 1
    ramp_up_period: Optional[DurationValue] = None
    duration: Optional[DurationValue] = None
    delay: Optional[DurationValue] = None


class SimpleThreadGroupHelper:
    """Reduces a list of stages to a plain JMeter thread group.

    Supported shapes are a single load stage, an optional initial delay
    stage (thread count 0) followed by a ramp-up stage, and a hold stage
    after both. Stages beyond those are not considered.
    """

    def __init__(self, stages: Sequence[Stage], name: Optional[str] = None) -> None:
        self.stages = list(stages)
        self.name = name

    def build_config(self) -> ThreadGroupConfig:
        if not self.stages:
            return ThreadGroupConfig()
        config = self._initial_config()
        first = self.stages[0]
        if len(self.stages) > 1:
            second = self.stages[1]
            config.threads = second.thread_count
            config.iterations = second.iterations
            if first.is_delay():
                config.ramp_up_period = second.duration
            else:
                config.duration = second.duration
            if first.is_delay() and len(self.stages) > 2:
                third = self.stages[2]
                config.duration = third.duration
                config.iterations = third.iterations
        config.duration = self._duration_including_ramp_up(config)
        return config

    def _initial_config(self) -> ThreadGroupConfig:
        """Config from first stage, before any ramp-up adjustment."""
        first = self.stages[0]
        ret = ThreadGroupConfig()
        if first.is_delay():
            ret.delay = first.duration
        else:
            ret.threads = first.thread_count
            ret.iterations = first.iterations
            if first.iterations is None:
                ret.ramp_up_period = first.duration
            else:
                ret.duration = first.duration
        return ret

    @staticmethod
    def _duration_including_ramp_up(config: ThreadGroupConfig) -> Optional[DurationValue]:
        # thread group duration counts from ramp-up start, stage hold time from its end
        ramp_up = config.ramp_up_period
        if (
            ramp_up is not None
            and ramp_up != timedelta(0)
            and (config.iterations is None or config.duration is not None)
        ):
            return sum_durations(config.duration, ramp_up) if config.duration is not None else ramp_up
        return config.duration

    def build_thread_group(self) -> TestElement:
        """Build the JMeter ThreadGroup element equivalent to the stages."""
        config = self.build_config()
        ret = TestElement("ThreadGroup", self.name or DEFAULT_NAME, "ThreadGroupGui")
        ret.set_property(NUM_THREADS, _as_text(config.threads))
        ret.set_property(
            RAMP_TIME,
            _as_text(config.ramp_up_period if config.ramp_up_period is not None else timedelta(0)),
        )
        loop_controller = TestElement("LoopController", "Loop Controller", "LoopControlPanel")
        loop_controller.set_property(CONTINUE_FOREVER, False)
        loop_controller.set_property(
            LOOPS, -1 if config.iterations is None else _as_text(config.iterations)
        )
        ret.set_property(MAIN_CONTROLLER, loop_controller)
        if config.duration is not None:
            ret.set_property(DURATION, _as_text(config.duration))
        if config.delay is not None:
            ret.set_property(DELAY, _as_text(config.delay))
        ret.set_property(SCHEDULER, config.duration is not None or config.delay is not None)
        ret.set_property(SAME_USER_ON_NEXT_ITERATION, False)
        return ret


def _parse_count(value: Union[int, float, str, None]) -> Optional[CountValue]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            pass
        try:
            number = float(value)
        except ValueError:
            return value
        return _whole_number(number)
    return _whole_number(value)


def _whole_number(value: Union[int, float]) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number or a JMeter expression, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"Expected a whole number, got {value}")
    return int(value)


def _as_text(value: Union[CountValue, DurationValue]) -> str:
    if isinstance(value, timedelta):
        return str(duration_to_seconds(value))
    return str(value)


def sum_durations(duration: DurationValue, ramp_up: DurationValue) -> DurationValue:
    """Add two durations, symbolically when any of them is an expression.

    Returns:
        The sum as a timedelta when both values are literal, otherwise a
        groovy function call computing the sum in seconds when evaluated
    """
    if isinstance(duration, timedelta) and isinstance(ramp_up, timedelta):
        return duration + ramp_up
    return jmeter_function(
        "__groovy",
        f"{_groovy_int_expression(_as_text(duration))} + {_groovy_int_expression(_as_text(ramp_up))}",
    )


def _groovy_int_expression(expression: str) -> str:
    # JMeter would expand ${...} before groovy runs, so they are masked and restored in groovy
    placeholder = "#"
    while placeholder + "{" in expression:
        placeholder += "#"
    escaped = (
        expression.replace("${", placeholder + "{")
        .replace("\\", "\\\\")
        .replace("'", "\\'")
    )
    return (
        "(new org.apache.jmeter.engine.util.CompoundVariable('"
        + escaped
        + "'.replace('"
        + placeholder
        + "','$')).execute() as int)"
    )


def jmeter_function(name: str, *args: str) -> str:
    """Build a JMeter function call, e.g. ${__groovy(1 + 2)}."""
    return "${" + name + "(" + ",".join(arg.replace(",", "\\,") for arg in args) + ")}"


class ThreadGroupCodeBuilder(SingleTestElementCallBuilder):
    """Converts a JMeter ThreadGroup into threadGroup(...) DSL code.

    A single flat call is used when values are literal and there is no
    ramp-up nor delay. Otherwise the schedule is expressed with chained
    holdFor, rampTo, holdIterating, upTo and rampToAndHold calls.
    """

    test_class = "ThreadGroup"
    builder_methods = ("threadGroup",)

    def build_method_call(self, context: MethodCallContext) -> MethodCall:
        element = context.test_element
        params = TestElementParamBuilder(element)
        name = params.name_param(DEFAULT_NAME)
        threads = params.int_param(NUM_THREADS)
        ramp_time = params.duration_param(RAMP_TIME, timedelta(seconds=1))
        scheduled = element.get_property_as_bool(SCHEDULER, True)
        duration = params.duration_param(DURATION) if scheduled else DurationParam(None)
        delay = params.duration_param(DELAY) if scheduled else DurationParam(None)
        iterations = params.int_param(MAIN_CONTROLLER + PATH_SEPARATOR + LOOPS, -1)
        if (
            isinstance(threads, IntParam)
            and isinstance(duration, DurationParam)
            and isinstance(iterations, IntParam)
            and _is_default_or_zero(ramp_time)
            and _is_default_or_zero(delay)
            and (_is_default_or_zero(duration) or iterations.is_default())
        ):
            return self.build_call(
                name,
                threads,
                iterations if _is_default_or_zero(duration) else duration,
                ChildrenParam("ThreadGroupChild[]"),
            )
        if not (
            isinstance(threads, IntParam)
            and isinstance(ramp_time, DurationParam)
            and isinstance(duration, DurationParam)
        ):
            threads = StringParam(threads.expression)
            ramp_time = StringParam(ramp_time.expression)
            duration = StringParam(duration.expression)
        ret = self.build_call(name)
        if not _is_default_or_zero(delay):
            ret.chain("holdFor", delay)
        if not iterations.is_default() or _is_default_or_zero(duration):
            ret.chain("rampTo", threads, ramp_time).chain(
                "holdIterating", iterations if not iterations.is_default() else IntParam(-1)
            )
            if not _is_default_or_zero(duration):
                ret.chain("upTo", self._hold_duration(duration, ramp_time, ret))
        else:
            ret.chain(
                "rampToAndHold", threads, ramp_time, self._hold_duration(duration, ramp_time, ret)
            )
        return ret

    @staticmethod
    def _hold_duration(duration: MethodParam, ramp_time: MethodParam, call: MethodCall) -> MethodParam:
        if isinstance(duration, DurationParam) and isinstance(ramp_time, DurationParam):
            if ramp_time.is_default():
                return DurationParam(duration.value)
            return DurationParam(duration.value - ramp_time.value)
        if not _is_default_or_zero(ramp_time):
            call.chain_comment(
                "To keep generated DSL simple, the original duration is used as hold for time. "
                "But, you should use as hold for time the original duration - ramp up period."
            )
        return duration


def _is_default_or_zero(param: MethodParam) -> bool:
    return param.is_default() or (isinstance(param, DurationParam) and param.is_zero())


def reconstruct_thread_group(
    stages: Sequence[Stage],
    name: Optional[str] = None,
    registry: Optional[BuilderRegistry] = None,
) -> CodeNode:
    """Build the DSL call equivalent to a list of load stages.

    Args:
        stages: Load profile stages, in order
        name: Thread group name, "Thread Group" when not given
        registry: DSL surface to resolve calls with, the packaged one by default

    Returns:
        threadGroup(...) call, ready to receive children
    """
    element = SimpleThreadGroupHelper(stages, name).build_thread_group()
    return ThreadGroupCodeBuilder(registry).build_method_call(MethodCallContext(element))
