"""Stuck detection for long-running navigation and work actions."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from mc_routines.adapters.engine import WorldQuery
from mc_routines.models import SupervisionState

ActionFactory = Callable[[], Awaitable[None]]


class ActionSupervisor:
    """Runs an action while a watchdog samples the agent every interval.

    The agent is stuck when, between two consecutive samples, its position did not
    change (within ``position_tolerance``) and it was busy at neither sample. Busy
    covers digging, building, crafting and container use, so legitimately stationary
    work is never cut short. On intervention the current goal is cancelled once and
    the action task is cancelled; ``supervise`` then returns False.
    """

    def __init__(
        self,
        world: WorldQuery,
        *,
        interval_seconds: float = 5.0,
        position_tolerance: float = 0.005,
        busy_check: Callable[[], bool] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._world = world
        self._interval_seconds = interval_seconds
        self._position_tolerance = position_tolerance
        self._busy_check = busy_check or world.is_busy
        self._logger = logger or logging.getLogger("mc_routines.supervisor")

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    async def supervise(
        self,
        action: ActionFactory,
        *,
        interval_seconds: float | None = None,
        cancel_when: Callable[[], bool] | None = None,
    ) -> bool:
        """Run ``action()`` to completion unless it stalls; True iff never judged stuck.

        ``cancel_when`` is checked on every tick and triggers the same intervention,
        e.g. when the block being dug has vanished. Errors raised by the action
        propagate once the watchdog is gone, except those caused by our own
        intervention, which are logged.
        """
        interval = self._interval_seconds if interval_seconds is None else interval_seconds
        state = SupervisionState(previous_position=self._world.current_position(), was_busy=self._busy_check())

        action_task = asyncio.ensure_future(action())
        watchdog = asyncio.create_task(self._watch(state, interval, cancel_when), name="action-supervisor")
        try:
            done, _ = await asyncio.wait({action_task, watchdog}, return_when=asyncio.FIRST_COMPLETED)
            if not state.stuck:
                if watchdog in done:
                    watchdog.result()
                action_task.result()
        finally:
            for task in (watchdog, action_task):
                if not task.done():
                    task.cancel()
            outcomes = await asyncio.gather(watchdog, action_task, return_exceptions=True)

        if state.stuck:
            if isinstance(outcomes[0], Exception):
                self._logger.warning("cancel_current_goal_failed", extra={"error": repr(outcomes[0])})
            error = outcomes[1]
            if isinstance(error, Exception):
                self._logger.info(
                    "supervised_action_aborted",
                    extra={"reason": state.reason, "error": f"{type(error).__name__}: {error}"},
                )
            return False
        return True

    async def _watch(
        self,
        state: SupervisionState,
        interval: float,
        cancel_when: Callable[[], bool] | None,
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            if self._check(state, cancel_when):
                return

    def _check(self, state: SupervisionState, cancel_when: Callable[[], bool] | None) -> bool:
        current = self._world.current_position()
        busy = self._busy_check()

        if cancel_when is not None and cancel_when():
            self._intervene(state, "cancel_condition")
            return True

        if current.equals(state.previous_position, self._position_tolerance) and not state.was_busy and not busy:
            self._intervene(state, "no_progress")
            return True

        state.previous_position = current
        state.was_busy = busy
        return False

    def _intervene(self, state: SupervisionState, reason: str) -> None:
        if state.stuck:
            return
        state.stuck = True
        state.reason = reason
        self._logger.warning(
            "action_stuck",
            extra={"reason": reason, "position": str(state.previous_position)},
        )
        self._world.cancel_current_goal()
