"""Event handlers and the readiness interests they are registered with."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass


class Interest(enum.Flag):
    """Readiness kinds a source can be watched for."""

    READABLE = enum.auto()
    WRITABLE = enum.auto()

    @property
    def is_readable(self) -> bool:
        return bool(self & Interest.READABLE)

    @property
    def is_writable(self) -> bool:
        return bool(self & Interest.WRITABLE)


@dataclass(frozen=True)
class Event:
    """A readiness notification for the source registered under ``token``."""

    token: int
    readable: bool = False
    writable: bool = False


class EventHandler(abc.ABC):
    """Something that reacts to readiness events of a registered source."""

    @abc.abstractmethod
    def handle_event(self, event: Event) -> None:
        """React to ``event``."""


@dataclass(frozen=True)
class HandlerEntry:
    """A handler together with the interest it was registered for."""

    handler: EventHandler
    interest: Interest

    def __post_init__(self) -> None:
        if not self.interest:
            raise ValueError("interest must include READABLE or WRITABLE")

    def accepts(self, event: Event) -> bool:
        """Whether ``event`` matches the registered interest."""
        return (self.interest.is_readable and event.readable) or (
            self.interest.is_writable and event.writable
        )