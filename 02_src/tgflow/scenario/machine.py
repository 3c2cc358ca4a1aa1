"""Scenario step execution."""

from typing import TYPE_CHECKING

from ..errors import UnknownStepError
from ..logging_config import get_logger
from ..models import ConversationState
from .scenario import Scenario, resolve_next

if TYPE_CHECKING:
    from ..context import UpdateContext

logger = get_logger(__name__)


async def run_step(
    scenario: Scenario,
    ctx: "UpdateContext",
    state: ConversationState,
    strict: bool = False,
) -> bool:
    """
    Advance ``state`` by exactly one step of ``scenario``.

    An empty ``state.step`` means the scenario is starting: the entry step runs
    on fresh scratch data. Otherwise the step is looked up by name.

    Args:
        scenario: Definition to execute.
        ctx: Context of the update that drives the step.
        state: Conversation state, mutated in place.
        strict: Raise UnknownStepError instead of doing nothing when the
                persisted step is not part of the definition.

    Returns:
        True if a step handler ran.

    Raises:
        Whatever the step handler raised; ``state.step`` is left unchanged.
    """
    if not state.step:
        step = scenario.entry
        if step is not None:
            state.data = {}
    else:
        step = scenario.find_step(state.step)
        if step is None and strict:
            raise UnknownStepError(state.scenario, state.step)

    if step is None:
        logger.warning(
            "No step %r in scenario %r, leaving state unchanged",
            state.step,
            scenario.name,
            extra=ctx.log_extra(scenario=scenario.name, step=state.step),
        )
        return False

    result = await step.handler(ctx, state)
    following = resolve_next(result)

    if following:
        state.step = following
    else:
        state.clear()

    logger.debug(
        "Scenario %r step %r -> %r",
        scenario.name,
        step.name,
        following or "<end>",
        extra=ctx.log_extra(scenario=scenario.name, step=step.name, next_step=following),
    )
    return True
