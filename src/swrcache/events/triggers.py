"""Environment triggers for revalidation.

A trigger source relays two host signals to the cache: the application
regained focus, and network connectivity was restored. Hosts without such
signals (servers, headless jobs) use NullTriggerSource, which installs
nothing.

Example:
    triggers = ManualTriggerSource()
    cache = SwrCache(triggers=triggers)

    # From the host's window or network monitor
    triggers.focus()
    triggers.reconnect()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)

TriggerHandler = Callable[[], None]


class TriggerSource(ABC):
    """Abstract source of focus and connectivity signals."""

    @abstractmethod
    def install(
        self,
        on_focus: TriggerHandler | None,
        on_reconnect: TriggerHandler | None,
    ) -> None:
        """Install handlers. A None handler leaves that signal unobserved."""
        pass

    @abstractmethod
    def uninstall(self) -> None:
        """Remove previously installed handlers."""
        pass


class NullTriggerSource(TriggerSource):
    """Trigger source for environments without focus or connectivity signals."""

    def install(
        self,
        on_focus: TriggerHandler | None,
        on_reconnect: TriggerHandler | None,
    ) -> None:
        logger.debug("No environment triggers available, skipping installation")

    def uninstall(self) -> None:
        pass


class ManualTriggerSource(TriggerSource):
    """Trigger source driven by the host application.

    The host calls focus() and reconnect() when it observes the
    corresponding event. Signals fired while nothing is installed are
    ignored.
    """

    def __init__(self) -> None:
        self._focus_handlers: list[TriggerHandler] = []
        self._reconnect_handlers: list[TriggerHandler] = []

    def install(
        self,
        on_focus: TriggerHandler | None,
        on_reconnect: TriggerHandler | None,
    ) -> None:
        if on_focus is not None:
            self._focus_handlers.append(on_focus)
        if on_reconnect is not None:
            self._reconnect_handlers.append(on_reconnect)

    def uninstall(self) -> None:
        self._focus_handlers.clear()
        self._reconnect_handlers.clear()

    def focus(self) -> None:
        """Signal that the application regained focus."""
        self._fire("focus", self._focus_handlers)

    def reconnect(self) -> None:
        """Signal that network connectivity was restored."""
        self._fire("reconnect", self._reconnect_handlers)

    @property
    def installed(self) -> bool:
        return bool(self._focus_handlers or self._reconnect_handlers)

    def _fire(self, signal: str, handlers: list[TriggerHandler]) -> None:
        logger.debug(f"Environment trigger fired: {signal}")
        for handler in list(handlers):
            try:
                handler()
            except Exception:
                logger.exception(f"Trigger handler failed for {signal}")
