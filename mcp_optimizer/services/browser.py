"""Headless Chromium launcher for Lighthouse audits using Playwright."""

from __future__ import annotations

import asyncio
import logging
import socket
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from playwright.async_api import Browser, Playwright, async_playwright

from mcp_optimizer.errors.exceptions import BrowserLaunchError

logger = logging.getLogger(__name__)


def check_playwright_browsers_available() -> None:
    """
    Check if Playwright Chromium browser is installed.

    Raises:
        BrowserLaunchError: If Chromium browser is not installed.
    """
    # Default: ~/.cache/ms-playwright on Linux/macOS, %USERPROFILE%\AppData\Local\ms-playwright on Windows
    playwright_cache = Path.home() / ".cache" / "ms-playwright"
    if sys.platform == "win32":
        playwright_cache = Path.home() / "AppData" / "Local" / "ms-playwright"

    # chromium-* or chromium_headless_shell-*
    if not playwright_cache.exists() or not list(playwright_cache.glob("chromium*")):
        raise BrowserLaunchError(
            "Playwright Chromium not installed. Run: playwright install chromium"
        )


def _free_port() -> int:
    """Ask the OS for an unused TCP port for the DevTools endpoint."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@dataclass
class BrowserInstance:
    """A launched browser and the CDP port Lighthouse connects to."""

    browser: Browser
    cdp_port: int


class BrowserLauncher:
    """
    Launches one Chromium per audit with CDP enabled.

    Browsers are never shared or pooled: each audit gets its own instance and
    it is closed when the audit leaves ``launch()``, whether it succeeded or not.
    """

    def __init__(self, launch_timeout: int = 30) -> None:
        self.launch_timeout = launch_timeout
        self._playwright: Playwright | None = None
        self._lock = asyncio.Lock()

    async def _ensure_started(self) -> Playwright:
        async with self._lock:
            if self._playwright is None:
                check_playwright_browsers_available()
                self._playwright = await async_playwright().start()
                logger.info("Playwright started")
            return self._playwright

    @asynccontextmanager
    async def launch(self) -> AsyncIterator[BrowserInstance]:
        """Launch a headless browser for the duration of the block."""
        playwright = await self._ensure_started()
        port = _free_port()

        try:
            browser = await asyncio.wait_for(
                playwright.chromium.launch(
                    headless=True,
                    args=[
                        f"--remote-debugging-port={port}",
                        "--no-sandbox",
                        "--disable-setuid-sandbox",
                        "--disable-dev-shm-usage",
                        "--disable-gpu",
                    ],
                ),
                timeout=self.launch_timeout,
            )
        except TimeoutError:
            raise BrowserLaunchError(f"Chromium did not start within {self.launch_timeout}s")
        except Exception as e:
            raise BrowserLaunchError(f"Chromium failed to start: {e}") from e

        logger.info(f"Launched browser on CDP port {port}")
        try:
            yield BrowserInstance(browser=browser, cdp_port=port)
        finally:
            try:
                await browser.close()
                logger.info(f"Closed browser on CDP port {port}")
            except Exception as e:
                logger.error(f"Error closing browser: {e}")

    async def shutdown(self) -> None:
        """Stop Playwright if it was started."""
        async with self._lock:
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
                logger.info("Playwright stopped")
