"""Explicit render/refresh message passing between the panel and its host."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Union

from rawgraph.metrics.observability import get_logger
from rawgraph.models import RenderReady

RenderListener = Callable[[RenderReady], None]
RefreshListener = Callable[[], Union[None, Awaitable[Any]]]


class PanelEvents:
    """Callback registry owned by the host."""

    def __init__(self) -> None:
        self._render_listeners: list[RenderListener] = []
        self._refresh_listeners: list[RefreshListener] = []
        self._logger = get_logger("events")

    def on_render(self, listener: RenderListener) -> Callable[[], None]:
        self._render_listeners.append(listener)
        return lambda: self._discard(self._render_listeners, listener)

    def on_refresh_requested(self, listener: RefreshListener) -> Callable[[], None]:
        self._refresh_listeners.append(listener)
        return lambda: self._discard(self._refresh_listeners, listener)

    def emit_render(self, event: RenderReady) -> None:
        for listener in list(self._render_listeners):
            listener(event)

    async def request_refresh(self) -> None:
        self._logger.debug("refresh.requested", listeners=len(self._refresh_listeners))
        for listener in list(self._refresh_listeners):
            result = listener()
            if inspect.isawaitable(result):
                await result

    @staticmethod
    def _discard(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)
