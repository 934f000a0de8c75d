"""Headless browser sessions backed by Playwright Chromium."""

from __future__ import annotations

import asyncio
import logging
import platform
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, AsyncContextManager, AsyncIterator, Protocol

from playwright.async_api import Browser as PlaywrightBrowserHandle
from playwright.async_api import Page, Playwright, async_playwright

from holdermap.core.exceptions import CaptureError

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Apple Silicon Mac OS X 14_0) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class Viewport:
    """Screenshot clip rectangle anchored at the top-left corner."""

    width: int
    height: int

    def as_clip(self) -> dict[str, int]:
        return {"x": 0, "y": 0, "width": self.width, "height": self.height}


class BrowserSession(Protocol):
    """One page in a freshly launched browser."""

    async def navigate(self, url: str, timeout: float) -> None: ...

    async def wait(self, seconds: float) -> None: ...

    async def evaluate(self, script: str) -> Any: ...

    async def press(self, key: str) -> None: ...

    async def set_content(self, html: str) -> None: ...

    async def screenshot(self, viewport: Viewport, timeout: float) -> bytes: ...


class Browser(Protocol):
    """Opens scoped browser sessions; leaving the scope always closes them."""

    def session(self) -> AsyncContextManager[BrowserSession]: ...


@dataclass
class LaunchOptions:
    """Chromium launch configuration."""

    headless: bool = True
    timeout: float = 60.0
    executable_path: str | None = None
    args: list[str] = field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--disable-gpu",
            "--disable-web-security",
            "--disable-features=IsolateOrigins,site-per-process",
        ]
    )

    def for_environment(self, *, in_docker: bool, system: str | None = None) -> LaunchOptions:
        """Add flags needed by the platform (`platform.system()` by default) and container."""
        args = list(self.args)
        if in_docker:
            args += ["--disable-features=VizDisplayCompositor", "--single-process"]
        system = system or platform.system()
        if system == "Linux":
            args.append("--no-zygote")
        elif system == "Windows":
            args.append("--disable-features=TranslateUI")
        return replace(self, args=args)

    def minimal(self) -> LaunchOptions:
        """Bare-minimum options for a second launch attempt."""
        return replace(
            self,
            args=["--no-sandbox", "--disable-setuid-sandbox", "--disable-gpu"],
            timeout=self.timeout * 1.5,
            executable_path=None,
        )

    def to_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "headless": self.headless,
            "args": self.args,
            "timeout": self.timeout * 1000,
        }
        if self.executable_path:
            kwargs["executable_path"] = self.executable_path
        return kwargs


def running_in_docker() -> bool:
    try:
        return "docker" in Path("/proc/1/cgroup").read_text()
    except OSError:
        return False


class PlaywrightSession:
    """BrowserSession over a Playwright page. Timeouts are in seconds."""

    def __init__(self, page: Page) -> None:
        self._page = page

    async def navigate(self, url: str, timeout: float) -> None:
        response = await self._page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=timeout * 1000,
        )
        if response is None or not response.ok:
            status = response.status if response is not None else "no response"
            raise CaptureError(f"Failed to load page: {status}", {"url": url})

    async def wait(self, seconds: float) -> None:
        await self._page.wait_for_timeout(seconds * 1000)

    async def evaluate(self, script: str) -> Any:
        return await self._page.evaluate(script)

    async def press(self, key: str) -> None:
        await self._page.keyboard.press(key)

    async def set_content(self, html: str) -> None:
        await self._page.set_content(html)

    async def screenshot(self, viewport: Viewport, timeout: float) -> bytes:
        return await self._page.screenshot(
            full_page=False,
            clip=viewport.as_clip(),
            timeout=timeout * 1000,
        )


class PlaywrightBrowser:
    """
    Launches one Chromium instance per session.

    Usage:
        async with PlaywrightBrowser(LaunchOptions()) as browser:
            async with browser.session() as session:
                await session.navigate(url, timeout=30)
                image = await session.screenshot(Viewport(1280, 800), timeout=15)
    """

    def __init__(
        self,
        launch_options: LaunchOptions | None = None,
        *,
        viewport: Viewport = Viewport(1280, 800),
        navigation_timeout: float = 60.0,
        user_agent: str = DESKTOP_USER_AGENT,
    ) -> None:
        self.launch_options = launch_options or LaunchOptions()
        self._effective_options = self.launch_options.for_environment(
            in_docker=running_in_docker()
        )
        self.viewport = viewport
        self.navigation_timeout = navigation_timeout
        self.user_agent = user_agent
        self._playwright: Playwright | None = None
        self._start_lock = asyncio.Lock()

    async def start(self) -> Playwright:
        """Start the Playwright driver (idempotent) and return it."""
        async with self._start_lock:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            return self._playwright

    async def close(self) -> None:
        """Stop the Playwright driver."""
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def _launch(self) -> PlaywrightBrowserHandle:
        playwright = await self.start()
        options = self._effective_options
        if options.executable_path:
            logger.info(f"Using custom Chromium executable: {options.executable_path}")
        try:
            return await playwright.chromium.launch(**options.to_kwargs())
        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            logger.info("Trying fallback browser launch options")
            return await playwright.chromium.launch(**options.minimal().to_kwargs())

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PlaywrightSession]:
        """Launch a browser, yield a page in it, and always close the browser."""
        browser = await self._launch()
        try:
            context = await browser.new_context(
                viewport={"width": self.viewport.width, "height": self.viewport.height},
                user_agent=self.user_agent,
                ignore_https_errors=True,
                bypass_csp=True,
            )
            page = await context.new_page()
            page.set_default_timeout(self.navigation_timeout * 1000)
            yield PlaywrightSession(page)
        finally:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

    async def __aenter__(self) -> PlaywrightBrowser:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
