"""Headless Chromium session handle.

Each render launches its own browser. The handle records whether the browser
already went away (closed by us or disconnected on its own) so teardown never
closes it twice and concurrent renders never share that state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

Log = Union[logging.Logger, logging.LoggerAdapter]

VIEWPORT: Dict[str, int] = {"width": 1920, "height": 1080}
DEVICE_SCALE_FACTOR = 1
LAUNCH_ARGS: List[str] = [
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--window-size=1920,1080",
]


class BrowserSession:
    def __init__(self, browser: Any, log: Log) -> None:
        self.browser = browser
        self.log = log
        self.disconnected = False
        self.closed = False
        browser.on("disconnected", self._on_disconnected)

    def _on_disconnected(self, *_args: Any) -> None:
        self.disconnected = True

    @property
    def is_open(self) -> bool:
        return not (self.closed or self.disconnected)

    def new_page(self) -> Any:
        self.log.info("Creating new page")
        return self.browser.new_page(viewport=VIEWPORT, device_scale_factor=DEVICE_SCALE_FACTOR)

    def close(self) -> None:
        """Close the browser once; errors are logged, never raised."""
        if not self.is_open:
            self.closed = True
            return
        try:
            self.browser.close()
        except Exception as exc:
            self.log.error(f"Error closing browser: {exc}")
        finally:
            self.closed = True

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()


def launch_browser(
    browser_type: Any,
    *,
    sandbox: bool = False,
    args: Optional[List[str]] = None,
    log: Log,
) -> BrowserSession:
    """Launch headless Chromium from a Playwright ``BrowserType``."""
    log.info("Launching headless browser")
    browser = browser_type.launch(
        headless=True,
        chromium_sandbox=sandbox,
        args=list(args if args is not None else LAUNCH_ARGS),
    )
    return BrowserSession(browser, log)
