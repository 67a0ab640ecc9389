"""HTTP command surface for the mode controller.

Exposes the host commands over HTTP so a test harness can switch recordsets
while traffic flows:

    POST /commands/{command}   body: {"value": "session1"}
    GET  /status

Usage:
    server = CommandServer(controller)
    await server.serve(host="127.0.0.1", port=3200)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from aiohttp import web

from recordset_vcr.controller import Command, ModeController, RequestContext
from recordset_vcr.core.errors import LoadAllError, MalformedManifestError, RecordsetNotFoundError

logger = logging.getLogger(__name__)


class CommandServer:
    """aiohttp application wrapping a :class:`ModeController`."""

    def __init__(self, controller: ModeController) -> None:
        self.controller = controller
        # Commands run one at a time, off the event loop.
        self._lock = asyncio.Lock()

    def make_app(self) -> web.Application:
        """Build the aiohttp application."""
        app = web.Application()
        app.router.add_post("/commands/{command}", self._handle_command)
        app.router.add_get("/status", self._handle_status)
        return app

    async def serve(self, host: str = "127.0.0.1", port: int = 3200) -> None:
        """Serve until cancelled."""
        logger.info(f"Starting command server on {host}:{port}")

        runner = web.AppRunner(self.make_app())
        await runner.setup()
        site = web.TCPSite(runner, host, port)
        await site.start()

        logger.info(f"Command server listening on http://{host}:{port}")

        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()

    def _status_body(self) -> dict[str, Any]:
        return self.controller.state.model_dump()

    async def _handle_status(self, request: web.Request) -> web.Response:
        return web.json_response(self._status_body())

    async def _handle_command(self, request: web.Request) -> web.Response:
        """Handle POST /commands/{command}.

        Args:
            request: aiohttp request

        Returns:
            JSON response with ``ok``, ``message`` and the resulting state
        """
        name = request.match_info["command"].upper()
        try:
            command = Command(name)
        except ValueError:
            return web.json_response(
                {"ok": False, "error": f"Unknown command: {name}"}, status=404
            )

        data: dict[str, Any] = {}
        if request.can_read_body:
            try:
                data = await request.json()
            except ValueError as e:
                logger.error(f"Invalid JSON in POST /commands/{name}: {e}")
                return web.json_response({"ok": False, "error": "Invalid JSON"}, status=400)
            if not isinstance(data, dict):
                return web.json_response(
                    {"ok": False, "error": "Body must be a JSON object"}, status=400
                )

        context = RequestContext(recordset=data.get("recordset"))
        async with self._lock:
            try:
                result = await asyncio.to_thread(
                    self.controller.dispatch, command, data.get("value"), request=context
                )
            except RecordsetNotFoundError as e:
                return self._error(e, 404)
            except (MalformedManifestError, LoadAllError) as e:
                return self._error(e, 422)
            except ValueError as e:
                return self._error(e, 400)

            body: dict[str, Any] = {
                "ok": True,
                "command": command.value,
                "message": result.message,
                **result.state.model_dump(),
            }
            if command is Command.RECORD_SET:
                body["bound"] = self.controller.resolve_request(context).recordset
        return web.json_response(body)

    def _error(self, error: Exception, status: int) -> web.Response:
        logger.error(f"Command failed: {error}")
        return web.json_response(
            {"ok": False, "error": str(error), **self._status_body()}, status=status
        )


__all__ = ["CommandServer"]
