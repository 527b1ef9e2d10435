#!/usr/bin/env python3
"""
clockmock command line.

Usage:
    clockmock surfaces                                   # List intercepted surfaces
    clockmock show --at 2021-05-11T14:30:00Z             # Preview frozen readings
    clockmock run --at 2021-05-11T14:30:00Z script.py    # Run a script with a frozen clock
    clockmock run --at 1620743400 -m package.module -- --flag
"""

import datetime
import importlib.util
import logging
import runpy
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import click
import dateparser
from returns.pipeline import is_successful

from clockmock.config import ClockMockConfig
from clockmock.engine import InterceptionEngine
from clockmock.exceptions import ClockMockError
from clockmock.instants import parse_instant, resolve_timezone
from clockmock.logging_config import LoggerType, logger_factory
from clockmock.scoped import execute_at_frozen_instant
from clockmock.surfaces import SUPPORTED_SURFACES


@dataclass
class CliContext:
    """Objects shared by every command."""

    config: ClockMockConfig
    logger: logging.Logger

    def create_engine(self) -> InterceptionEngine:
        try:
            return InterceptionEngine(config=self.config, logger=self.logger)
        except ClockMockError as e:
            raise click.ClickException(str(e)) from e


class InstantParamType(click.ParamType):
    """Click parameter accepting ISO-8601 instants or epoch seconds."""

    name = "instant"

    def convert(self, value, param, ctx):
        if isinstance(value, datetime.datetime):
            return value

        default_tz = datetime.timezone.utc
        obj = ctx.find_object(CliContext) if ctx is not None else None
        if obj is not None:
            default_tz = resolve_timezone(obj.config.default_timezone)

        result = parse_instant(value, default_tz)
        if not is_successful(result):
            self.fail(result.failure(), param, ctx)
        return result.unwrap()


INSTANT = InstantParamType()


def collect_readings() -> list[tuple[str, str]]:
    """Read every surface through its public name, as code under test would."""
    return [
        ("time.time()", repr(time.time())),
        ("time.time_ns()", str(time.time_ns())),
        ("time.ctime()", time.ctime()),
        ("time.strftime()", time.strftime("%Y-%m-%d %H:%M:%S %Z")),
        ("time.gmtime()", time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime())),
        ("datetime.now()", datetime.datetime.now().isoformat()),
        ("datetime.now(utc)", datetime.datetime.now(datetime.timezone.utc).isoformat()),
        ("date.today()", datetime.date.today().isoformat()),
        ("dateparser 'in 1 day'", str(dateparser.parse("in 1 day", languages=["en"]))),
    ]


def format_readings(instant: datetime.datetime, readings: list[tuple[str, str]]) -> str:
    width = max(len(label) for label, _ in readings)
    output = [f"Frozen at {instant.isoformat()}", "-" * 60]
    for label, value in readings:
        output.append(f"{label.ljust(width)}  {value}")
    return "\n".join(output)


def _run_target(target: str, as_module: bool) -> None:
    if as_module:
        runpy.run_module(target, run_name="__main__", alter_sys=True)
    else:
        runpy.run_path(target, run_name="__main__")


@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to configuration file (defaults to ./clockmock.yaml)")
@click.option("--verbose", is_flag=True, help="Log engine activity to the console")
@click.option("--log-file", type=click.Path(path_type=Path), default=None,
              help="Write a debug log to this file")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool, log_file: Path | None):
    """Freeze wall-clock time for tests and scripts."""
    try:
        config = ClockMockConfig.load(config_path)
    except ClockMockError as e:
        raise click.ClickException(str(e)) from e

    if log_file is not None:
        level = logging.DEBUG if verbose else logging.WARNING
        logger = logger_factory(LoggerType.DEFAULT, log_file=log_file, level=level)
    elif verbose:
        logger = logger_factory(LoggerType.CONSOLE, level=logging.DEBUG)
    else:
        logger = logger_factory(LoggerType.NULL)

    ctx.obj = CliContext(config=config, logger=logger)


@cli.command("surfaces")
def list_surfaces():
    """List every time surface clockmock intercepts."""
    width = max(len(surface.name) for surface in SUPPORTED_SURFACES)
    for surface in SUPPORTED_SURFACES:
        click.echo(f"{surface.name.ljust(width)}  {surface.kind.value}")


@cli.command("show")
@click.option("--at", "instant", required=True, type=INSTANT, help="Instant to freeze at")
@click.pass_obj
def show(obj: CliContext, instant: datetime.datetime):
    """Show what the intercepted surfaces report at an instant."""
    engine = obj.create_engine()
    readings = execute_at_frozen_instant(instant, collect_readings, engine=engine)
    click.echo(format_readings(instant, readings))


@cli.command(
    "run",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.option("--at", "instant", required=True, type=INSTANT, help="Instant to freeze at")
@click.option("-m", "--module", "as_module", is_flag=True, help="Run TARGET as a module")
@click.argument("target")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def run(obj: CliContext, instant: datetime.datetime, as_module: bool, target: str, args: tuple[str, ...]):
    """Run a Python script or module with the clock frozen."""
    if as_module:
        try:
            spec = importlib.util.find_spec(target)
        except (ImportError, ValueError):
            spec = None
        if spec is None:
            raise click.ClickException(f"No module named {target}")
    elif not Path(target).exists():
        raise click.ClickException(f"Script not found: {target}")

    engine = obj.create_engine()
    obj.logger.info(f"Running {target} frozen at {instant.isoformat()}")

    saved_argv = sys.argv[:]
    sys.argv = [target, *args]
    try:
        execute_at_frozen_instant(instant, lambda: _run_target(target, as_module), engine=engine)
    finally:
        sys.argv = saved_argv


def main():
    """Main entry point for the clockmock command."""
    cli()


if __name__ == "__main__":
    main()
