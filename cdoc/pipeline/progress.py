"""Progress events and reporters.

Reporters observe the pipeline and never influence it. EchoReporter
prints one line per event; NullReporter is the quiet-mode stand-in.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, Union

import click

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryStarted:
    path: str


@dataclass(frozen=True)
class EntryIgnored:
    path: str
    reason: str = "matches ignore pattern"


@dataclass(frozen=True)
class EntryFailed:
    path: str
    reason: str


@dataclass(frozen=True)
class EntryCompleted:
    path: str
    target: str = ""


@dataclass(frozen=True)
class RunCompleted:
    count: int
    failures: int = 0


ProgressEvent = Union[EntryStarted, EntryIgnored, EntryFailed, EntryCompleted, RunCompleted]


class ProgressReporter(Protocol):
    """Anything that can observe pipeline progress events."""

    def report(self, event: ProgressEvent) -> None: ...


class NullReporter:
    """Discards every event."""

    def report(self, event: ProgressEvent) -> None:
        pass


class EchoReporter:
    """Prints human-readable progress lines with click.

    Failures go to stderr, everything else to stdout.
    """

    def report(self, event: ProgressEvent) -> None:
        if isinstance(event, EntryStarted):
            click.echo(f"Processing {event.path}")
        elif isinstance(event, EntryCompleted):
            click.echo(f"  -> {event.target}" if event.target else f"  done {event.path}")
        elif isinstance(event, EntryIgnored):
            click.echo(f"Ignoring {event.path} ({event.reason})")
        elif isinstance(event, EntryFailed):
            click.echo(f"Failed {event.path}: {event.reason}", err=True)
        elif isinstance(event, RunCompleted):
            line = f"Generated {event.count} document{'s' if event.count != 1 else ''}"
            if event.failures:
                line += f", {event.failures} failed"
            click.echo(line)
        else:
            logger.debug("Unhandled progress event %r", event)


def make_reporter(verbose: bool) -> ProgressReporter:
    """Pick the reporter for a verbosity setting.

    Args:
        verbose: False selects quiet mode.

    Returns:
        An EchoReporter when verbose, otherwise a NullReporter.
    """
    return EchoReporter() if verbose else NullReporter()
