"""Tests for scenario definitions and step execution."""

import pytest

from tgflow.context import build_context, parse_update
from tgflow.errors import ScenarioDefinitionError, UnknownStepError
from tgflow.models import ConversationState
from tgflow.scenario import (
    TERMINATE,
    Continue,
    Scenario,
    Terminate,
    new_scenario,
    next_step,
    resolve_next,
    run_step,
    terminate,
)

from factories import message_update


@pytest.fixture
def ctx(sender):
    return build_context(parse_update(message_update("answer")), sender)


def _recording_scenario(calls, result_by_step):
    """Scenario whose steps record their calls and return canned results."""

    def make(name):
        async def handler(ctx, state):
            calls.append((name, dict(state.data or {})))
            state.data[name] = ctx.text
            return result_by_step[name]

        return handler

    builder = new_scenario("flow").triggered_by("begin")
    for name in result_by_step:
        builder.add_step(name, make(name))
    return builder.create()


class TestScenarioBuilder:
    """Tests for ScenarioBuilder."""

    def test_build(self):
        """Test building a scenario."""

        async def step(ctx, state):
            return terminate()

        scenario = (
            new_scenario("signup")
            .triggered_by("/signup", "sign me up")
            .add_step("one", step)
            .add_step("two", step)
            .create()
        )
        assert scenario.name == "signup"
        assert scenario.triggers == ("/signup", "sign me up")
        assert [s.name for s in scenario.steps] == ["one", "two"]
        assert scenario.entry.name == "one"
        assert scenario.find_step("two") is scenario.steps[1]
        assert scenario.find_step("three") is None

    def test_triggered_by_replaces(self):
        """Test that triggered_by sets, not appends."""

        async def step(ctx, state):
            return None

        scenario = (
            new_scenario("s").triggered_by("a").triggered_by("b").add_step("x", step).create()
        )
        assert scenario.triggers == ("b",)

    def test_duplicate_step_rejected(self):
        """Test that step names must be unique."""

        async def step(ctx, state):
            return None

        builder = new_scenario("s").add_step("x", step)
        with pytest.raises(ScenarioDefinitionError):
            builder.add_step("x", step)

    def test_empty_names_rejected(self):
        """Test that empty scenario or step names are rejected."""

        async def step(ctx, state):
            return None

        with pytest.raises(ScenarioDefinitionError):
            new_scenario("")
        with pytest.raises(ScenarioDefinitionError):
            new_scenario("s").add_step("", step)

    def test_no_steps_rejected(self):
        """Test that a scenario needs at least one step."""
        with pytest.raises(ScenarioDefinitionError):
            new_scenario("s").triggered_by("go").create()

    def test_definition_is_immutable(self):
        """Test that a created scenario cannot be modified."""

        async def step(ctx, state):
            return None

        scenario = new_scenario("s").add_step("x", step).create()
        with pytest.raises(AttributeError):
            scenario.name = "other"


class TestStepResult:
    """Tests for step result flattening."""

    def test_continue(self):
        assert resolve_next(next_step("age")) == "age"
        assert next_step("age") == Continue("age")

    def test_terminate(self):
        assert resolve_next(terminate()) == ""
        assert terminate() is TERMINATE
        assert Terminate() is TERMINATE

    def test_plain_strings_and_none(self):
        """Test legacy string results."""
        assert resolve_next("age") == "age"
        assert resolve_next("") == ""
        assert resolve_next(None) == ""

    def test_continue_requires_name(self):
        with pytest.raises(ValueError):
            Continue("")

    def test_unsupported_result(self):
        with pytest.raises(TypeError):
            resolve_next(42)


class TestRunStep:
    """Tests for run_step()."""

    async def test_start_runs_entry_with_fresh_data(self, ctx):
        """Test that starting resets scratch data and runs the first step."""
        calls = []
        scenario = _recording_scenario(calls, {"s1": "s2", "s2": ""})
        state = ConversationState(scenario="flow", data={"stale": True})

        ran = await run_step(scenario, ctx, state)

        assert ran
        assert calls == [("s1", {})]
        assert state.scenario == "flow"
        assert state.step == "s2"
        assert state.data == {"s1": "answer"}

    async def test_resume_locates_step_by_name(self, ctx):
        """Test resuming runs the named step with data intact."""
        calls = []
        scenario = _recording_scenario(calls, {"s1": "s2", "s2": "s3", "s3": ""})
        state = ConversationState(scenario="flow", step="s3", data={"s1": "x"})

        await run_step(scenario, ctx, state)

        assert calls == [("s3", {"s1": "x"})]

    async def test_terminate_clears_state(self, ctx):
        """Test that an empty next step clears everything together."""
        scenario = _recording_scenario([], {"s1": "s2", "s2": TERMINATE})
        state = ConversationState(scenario="flow", step="s2", data={"s1": "x"})

        await run_step(scenario, ctx, state)

        assert state == ConversationState(scenario="", step="", data=None)

    async def test_immediate_termination(self, ctx):
        """Test a one-step scenario returns to idle right away."""
        scenario = _recording_scenario([], {"only": ""})
        state = ConversationState(scenario="flow")

        await run_step(scenario, ctx, state)

        assert not state.is_active
        assert state.data is None

    async def test_unknown_step_is_noop(self, ctx):
        """Test that an unknown step leaves state untouched."""
        calls = []
        scenario = _recording_scenario(calls, {"s1": "s2"})
        state = ConversationState(scenario="flow", step="gone", data={"k": 1})

        ran = await run_step(scenario, ctx, state)

        assert not ran
        assert calls == []
        assert state == ConversationState(scenario="flow", step="gone", data={"k": 1})

    async def test_unknown_step_strict(self, ctx):
        """Test that strict mode raises for an unknown step."""
        scenario = _recording_scenario([], {"s1": "s2"})
        state = ConversationState(scenario="flow", step="gone", data={"k": 1})

        with pytest.raises(UnknownStepError) as exc_info:
            await run_step(scenario, ctx, state, strict=True)

        assert exc_info.value.step == "gone"
        assert state.step == "gone"

    async def test_empty_scenario_is_noop(self, ctx):
        """Test that a placeholder scenario without steps does nothing."""
        state = ConversationState(scenario="missing", step="s1", data={"k": 1})

        ran = await run_step(Scenario(name="missing"), ctx, state)

        assert not ran
        assert state.data == {"k": 1}

    async def test_handler_error_keeps_step(self, ctx):
        """Test that a failing step makes no forward progress."""

        async def boom(ctx, state):
            state.data["touched"] = True
            raise RuntimeError("boom")

        scenario = new_scenario("flow").add_step("s1", boom).create()
        state = ConversationState(scenario="flow", step="s1", data={})

        with pytest.raises(RuntimeError):
            await run_step(scenario, ctx, state)

        assert state.scenario == "flow"
        assert state.step == "s1"
