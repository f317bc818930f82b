"""Registry HTTP server using aiohttp."""

from __future__ import annotations

import asyncio
import json
import logging
import signal
from typing import Any, Dict, Optional

from aiohttp import web

from .archive import ArtifactCache
from .config import RegistryConfig
from .constants import Constants
from .errors import CacheWriteError, RegistryError
from .manifest import ManifestBuilder
from .request_parser import ParsedRequest, RequestKind, RequestParser

logger = logging.getLogger(__name__)

_CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-expose-headers": "*",
}


class RegistryServer:
    """Read-only npm-compatible registry for single-file ES modules.

    Serves synthesized manifests for ``/@scope%2fname`` and cached archives
    for ``/@scope/name/{version}.tgz``. Every failure is answered with a
    plain-text 404 so probing clients learn nothing about the store layout;
    only a failed cache write surfaces as a 500.
    """

    def __init__(self, config: RegistryConfig):
        """Initialize the registry server.

        Args:
            config: Server configuration.
        """
        self._config = config
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None

        self._parser = RequestParser()
        self._manifests = ManifestBuilder(config)
        self._artifacts = ArtifactCache(config)

    def _create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        app.router.add_route("*", "/{path:.*}", self._handle_request)
        app.on_startup.append(self._on_startup)
        app.on_cleanup.append(self._on_cleanup)
        return app

    async def _on_startup(self, app: web.Application) -> None:
        """Called when the server starts."""
        logger.info("Registry server starting on %s:%s", self._config.host, self._config.port)

    async def _on_cleanup(self, app: web.Application) -> None:
        """Called when the server stops."""
        logger.info("Registry server stopped")

    async def _handle_request(self, request: web.Request) -> web.StreamResponse:
        """Handle incoming registry requests.

        Args:
            request: Incoming HTTP request.

        Returns:
            HTTP response.
        """
        method = request.method
        if method == Constants.PREFLIGHT_METHOD:
            return self._preflight_response()
        if method not in Constants.READ_METHODS:
            logger.debug("Invalid method %s", method)
            return self._not_found()

        parsed = self._parser.parse(request.rel_url.raw_path)
        if not parsed.is_valid:
            logger.debug("Invalid request path: %s", parsed.raw_path)
            return self._not_found()

        logger.info("Request: %s %s -> %s", method, parsed.raw_path, parsed.kind.value)

        try:
            if parsed.kind == RequestKind.MANIFEST:
                return await self._manifest_response(request, parsed)
            return await self._tarball_response(parsed)
        except CacheWriteError:
            logger.exception("Could not cache archive for %s@%s", parsed.package_name, parsed.version)
            return web.Response(status=500, text="Internal server error")
        except RegistryError as e:
            logger.info("Not found: %s (%s)", parsed.raw_path, e)
            return self._not_found()

    async def _manifest_response(self, request: web.Request, parsed: ParsedRequest) -> web.Response:
        """Build and return the JSON manifest for a package."""
        base_url = self._base_url(request)
        manifest = await self._manifests.build(parsed.scope, parsed.name, base_url)
        if manifest is None:
            logger.info("No manifest for %s", parsed.package_name)
            return self._not_found()

        headers = {**_CORS_HEADERS, "cache-control": Constants.MANIFEST_CACHE_CONTROL}
        return web.Response(
            status=200,
            headers=headers,
            content_type="application/json",
            body=json.dumps(manifest).encode(),
        )

    async def _tarball_response(self, parsed: ParsedRequest) -> web.FileResponse:
        """Stream the (possibly freshly built) archive for a version."""
        path = await self._artifacts.get_or_build(parsed.scope, parsed.name, parsed.version)
        return web.FileResponse(
            path,
            headers={
                "content-type": "application/octet-stream",
                "cache-control": Constants.TARBALL_CACHE_CONTROL,
            },
        )

    def _base_url(self, request: web.Request) -> str:
        """Public ``scheme://host`` the client used to reach us.

        Prefers the forwarding proxy's headers over the direct Host header.
        """
        host = request.headers.get("X-Forwarded-Host") or request.headers.get("Host") or (
            f"{self._config.host}:{self._config.port}"
        )
        scheme = request.headers.get("X-Forwarded-Proto") or self._config.scheme
        # Proxies may append a comma-separated chain; the first hop is the client
        host = host.split(",")[0].strip()
        scheme = scheme.split(",")[0].strip()
        return f"{scheme}://{host}"

    @staticmethod
    def _preflight_response() -> web.Response:
        """Answer a CORS preflight request."""
        return web.Response(
            status=204,
            headers={
                **_CORS_HEADERS,
                "access-control-allow-methods": ", ".join(
                    Constants.READ_METHODS + (Constants.PREFLIGHT_METHOD,)
                ),
                "access-control-allow-headers": "*",
            },
        )

    @staticmethod
    def _not_found() -> web.Response:
        """Uniform plain-text 404."""
        return web.Response(status=404, text="Not found")

    def cache_stats(self) -> Dict[str, Any]:
        """Get artifact cache statistics."""
        return self._artifacts.stats()

    async def start(self) -> None:
        """Start the registry server."""
        self._app = self._create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(
            self._runner,
            self._config.host,
            self._config.port,
        )
        await site.start()

        logger.info(
            "Registry listening on http://%s:%s",
            self._config.host, self._config.port,
        )
        logger.info("Module store: %s", self._config.data_path)
        logger.info("Cache store: %s", self._config.cache_path)

    async def stop(self) -> None:
        """Stop the registry server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None


def run_server_sync(config: RegistryConfig) -> None:
    """Run the registry server synchronously.

    Installs signal handlers for SIGTERM and SIGINT for clean shutdown.

    Args:
        config: Server configuration.
    """
    server = RegistryServer(config)
    loop = asyncio.new_event_loop()

    async def run():
        await server.start()
        stop_event = asyncio.Event()
        running_loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            running_loop.add_signal_handler(sig, stop_event.set)
        await stop_event.wait()
        logger.info("Shutdown signal received, stopping...")
        await server.stop()

    try:
        loop.run_until_complete(run())
    except KeyboardInterrupt:
        # Fallback for platforms where signal handlers don't work (Windows)
        loop.run_until_complete(server.stop())
    finally:
        loop.close()
        logger.info("Registry server shutdown complete")
