"""Command and event boundary between the UI and the background services.

The UI never calls the probe or the autostart helpers directly. It invokes
named commands (request/response) and listens on named channels (push).
Blocking handlers run in a worker thread so the event loop stays free.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)

Unlisten = Callable[[], None]


class CommandError(Exception):
    """A command was rejected by its handler."""

    def __init__(self, command: str, message: str):
        super().__init__(f"{command}: {message}")
        self.command = command
        self.message = message


class UnknownCommandError(CommandError):
    """No handler is registered for the command."""

    def __init__(self, command: str):
        super().__init__(command, "no such command")


class CommandBridge:
    """Registry of command handlers and event listeners."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._commands: dict[str, Callable[..., Any]] = {}
        self._listeners: dict[str, dict[int, Callable[[Any], None]]] = {}
        self._next_id = 0

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def register(self, name: str, handler: Callable[..., Any]) -> None:
        """Register a command handler.

        Args:
            name: Command name
            handler: Plain function (run in a worker thread) or coroutine
                function (awaited on the loop)
        """
        self._commands[name] = handler

    async def invoke(self, name: str, **kwargs: Any) -> Any:
        """Invoke a command and wait for its result.

        Raises:
            UnknownCommandError: If no handler is registered
            CommandError: If the handler raised
        """
        handler = self._commands.get(name)
        if handler is None:
            raise UnknownCommandError(name)

        try:
            if inspect.iscoroutinefunction(handler):
                return await handler(**kwargs)
            return await asyncio.to_thread(handler, **kwargs)
        except CommandError:
            raise
        except Exception as e:
            log.debug("Command %s failed: %s", name, e)
            raise CommandError(name, str(e)) from e

    async def listen(self, event: str, handler: Callable[[Any], None]) -> Unlisten:
        """Subscribe to an event channel.

        Opening the subscription suspends once, like any other call across
        the boundary.

        Args:
            event: Channel name
            handler: Called on the loop with each payload

        Returns:
            Function that removes the subscription; calling it twice is a no-op
        """
        self._get_loop()
        await asyncio.sleep(0)

        listener_id = self._next_id
        self._next_id += 1
        self._listeners.setdefault(event, {})[listener_id] = handler

        def unlisten() -> None:
            self._listeners.get(event, {}).pop(listener_id, None)

        return unlisten

    def emit(self, event: str, payload: Any) -> None:
        """Deliver a payload to every current listener of a channel.

        Delivery is scheduled on the loop, never run inside the caller.
        Safe to call from a worker thread.
        """
        listeners = self._listeners.get(event)
        if not listeners:
            return

        loop = self._get_loop()
        for listener_id, handler in list(listeners.items()):
            loop.call_soon_threadsafe(self._deliver, event, listener_id, handler, payload)

    def _deliver(
        self,
        event: str,
        listener_id: int,
        handler: Callable[[Any], None],
        payload: Any
    ) -> None:
        # The listener may have unsubscribed between emit and delivery
        if listener_id not in self._listeners.get(event, {}):
            return
        try:
            handler(payload)
        except Exception:
            log.exception("Listener for %s failed", event)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, {}))
