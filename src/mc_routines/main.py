"""CLI startup entrypoint for MC Routines."""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import Any

import typer
from rich import print

from mc_routines.adapters import SimulatedWorld, demo_world
from mc_routines.agent import RoutineAgent
from mc_routines.cli import CliRoutineHandler
from mc_routines.config import settings
from mc_routines.models import FindResult, WorldObjectKind
from mc_routines.routines import ROUTINES
from mc_routines.runtime import RoutineRuntime
from mc_routines.session import AgentSession
from mc_routines.telemetry.logging import configure_logging

app = typer.Typer(help="MC Routines agent scripting entrypoint")


def _build_world() -> SimulatedWorld:
    return demo_world(time_scale=settings.demo_time_scale)


def _build_agent(world: SimulatedWorld | None = None) -> RoutineAgent:
    return RoutineAgent(AgentSession(world or _build_world(), settings=settings))


def _build_runtime(agent: RoutineAgent) -> tuple[RoutineRuntime, CliRoutineHandler]:
    runtime = RoutineRuntime(
        agent,
        ROUTINES,
        routine_timeout_seconds=settings.routine_timeout_seconds,
        max_retries=settings.routine_max_retries,
        retry_delay_seconds=settings.routine_retry_delay_seconds,
    )
    return runtime, CliRoutineHandler(runtime=runtime)


def _parse_param(raw: str) -> tuple[str, Any]:
    key, separator, value = raw.partition("=")
    if not separator or not key:
        raise typer.BadParameter(f"Expected key=value, got {raw!r}")
    if "," in value:
        return key, [part for part in value.split(",") if part]
    for convert in (int, float):
        try:
            return key, convert(value)
        except ValueError:
            continue
    return key, value


def _format_result(found: FindResult) -> dict:
    return {
        "object": asdict(found.result),
        "value": found.value,
        "sort_value": round(found.sort_value, 3),
        "distance": round(found.distance, 3),
    }


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(settings.model_dump())


@app.command()
def routines() -> None:
    """List the routines that can be run."""
    print({"routines": sorted(ROUTINES)})


@app.command()
def find(
    kind: WorldObjectKind = typer.Argument(..., help="entity, block or ground_item"),
    names: list[str] = typer.Argument(None, help="Names to match; omit to match everything"),
    partial: bool = typer.Option(False, help="Match names by substring"),
    max_count: int = typer.Option(5, help="How many ranked results to return"),
    max_distance: float = typer.Option(None, help="Search radius in blocks"),
) -> None:
    """Rank objects around the agent in the demo world."""
    agent = _build_agent()
    if kind == WorldObjectKind.ENTITY:
        results = agent.find_entities(names or [], partial_match=partial, max_distance=max_distance, max_count=max_count)
    elif kind == WorldObjectKind.BLOCK:
        results = agent.find_blocks(names or [], partial_match=partial, max_distance=max_distance, max_count=max_count)
    else:
        results = agent.find_items_on_ground(
            names or [], partial_match=partial, max_distance=max_distance, max_count=max_count
        )

    if not results:
        print({"kind": kind.value, "results": []})
        raise typer.Exit(code=1)
    print({"kind": kind.value, "results": [_format_result(found) for found in results]})


@app.command("run-routine")
def run_routine(
    name: str = typer.Argument(..., help="Routine name, see `routines`"),
    param: list[str] = typer.Option(None, "--param", "-p", help="Routine parameter as key=value"),
    timeout: float = typer.Option(120.0, help="Seconds to wait for the job to finish"),
) -> None:
    """Run a routine against the demo world and wait for its outcome."""
    if name not in ROUTINES:
        raise typer.BadParameter(f"Unknown routine {name!r}; choose from {', '.join(sorted(ROUTINES))}")
    params = dict(_parse_param(raw) for raw in param or [])
    configure_logging(settings.log_level)

    world = _build_world()
    runtime, cli_handler = _build_runtime(_build_agent(world))

    async def _run() -> dict:
        await runtime.start()
        try:
            job_id = cli_handler.submit_routine(name, **params)
            await asyncio.wait_for(runtime.join(), timeout=timeout)
            job = cli_handler.get_job(job_id)
        finally:
            await runtime.stop()
        inventory: dict[str, int] = {}
        for stack in world.inventory_snapshot():
            inventory[stack.name] = inventory.get(stack.name, 0) + stack.count
        return {
            "job_id": job.id,
            "status": job.status.value,
            "attempts": job.attempts,
            "error": job.error,
            "inventory": inventory,
            "position": str(world.current_position()),
        }

    outcome = asyncio.run(_run())
    print({"routine_result": outcome})
    if outcome["status"] != "succeeded":
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
