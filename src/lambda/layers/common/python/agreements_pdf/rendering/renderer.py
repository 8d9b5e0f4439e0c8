"""Render a hosted agreement page to a local PDF with headless Chromium.

Render protocol:
    1. launch an isolated headless browser (1920x1080 viewport)
    2. mint the ``x-encrypted-auth`` token and attach it to every request
       sent to the agreement host
    3. open the agreement URL (DOM content loaded)
    4. resubmit the page as a same-origin POST with ``action=view-agreement``,
       which switches the server into its printable view
    5. wait for that navigation to go network idle
    6. print to A4 PDF with backgrounds and 20px margins
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from playwright.sync_api import sync_playwright

from agreements_pdf.errors import RenderError
from agreements_pdf.models.events import AgreementData
from agreements_pdf.models.settings import AgreementPdfSettings
from agreements_pdf.rendering.auth import AUTH_HEADER, mint_auth_token
from agreements_pdf.rendering.browser import launch_browser
from agreements_pdf.storage.keys import build_local_pdf_path
from agreements_pdf.utils.files import ensure_private_dir, remove_temporary_file
from agreements_pdf.utils.logger import get_logger

Log = Union[logging.Logger, logging.LoggerAdapter]

logger = get_logger(__name__)

PDF_FORMAT = "A4"
PDF_MARGINS: Dict[str, str] = {"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"}

SUBMIT_VIEW_AGREEMENT_SCRIPT = """
() => {
  const form = document.createElement('form');
  form.method = 'POST';
  form.action = window.location.href;

  const input = document.createElement('input');
  input.type = 'hidden';
  input.name = 'action';
  input.value = 'view-agreement';

  form.appendChild(input);
  document.body.appendChild(form);
  form.submit();
}
"""


class AgreementRenderer:
    def __init__(
        self,
        tmp_folder: str,
        jwt_secret: Optional[str],
        *,
        token_source: str = "defra",
        token_ttl_seconds: int = 300,
        sandbox: bool = False,
        navigation_timeout_ms: int = 30000,
        playwright_factory: Callable[[], Any] = sync_playwright,
        log: Optional[Log] = None,
    ) -> None:
        self.tmp_folder = tmp_folder
        self.jwt_secret = jwt_secret
        self.token_source = token_source
        self.token_ttl_seconds = token_ttl_seconds
        self.sandbox = sandbox
        self.navigation_timeout_ms = navigation_timeout_ms
        self._playwright_factory = playwright_factory
        self.log = log or logger

    @classmethod
    def from_settings(cls, settings: AgreementPdfSettings, **kwargs: Any) -> "AgreementRenderer":
        return cls(
            settings.tmp_folder,
            settings.jwt_secret,
            token_source=settings.auth_token_source,
            token_ttl_seconds=settings.auth_token_ttl_seconds,
            sandbox=settings.browser_sandbox,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            **kwargs,
        )

    def render(self, agreement: Union[AgreementData, Mapping[str, Any]], filename: str) -> str:
        """Render ``agreement.agreementUrl`` into a PDF and return its local path.

        The caller owns the returned file. On any failure the partial file is
        removed and the original error re-raised.
        """
        data = agreement if isinstance(agreement, AgreementData) else AgreementData.model_validate(agreement)
        context = {
            "agreement_number": data.agreement_number,
            "version": data.version,
            "pdf_filename": filename,
        }
        output_path = build_local_pdf_path(ensure_private_dir(self.tmp_folder), filename)

        try:
            if not data.agreement_url:
                raise RenderError("agreementUrl is required to render a PDF")
            with self._playwright_factory() as playwright:
                with launch_browser(playwright.chromium, sandbox=self.sandbox, log=self.log) as session:
                    page = session.new_page()
                    self._print_agreement(page, data.agreement_url, output_path)
            if not os.path.isfile(output_path):
                raise RenderError(f"PDF {filename} was not written to {output_path}")
        except Exception as exc:
            self.log.error(
                f"Error generating PDF {filename}: {exc}",
                extra={**context, "output_path": output_path, "error": str(exc)},
            )
            if os.path.exists(output_path):
                remove_temporary_file(output_path, self.log)
            raise

        self.log.info(
            f"PDF {filename} generated successfully and saved to {output_path}",
            extra={**context, "output_path": output_path},
        )
        return output_path

    def _print_agreement(self, page: Any, url: str, output_path: str) -> None:
        page.set_default_navigation_timeout(self.navigation_timeout_ms)
        self._attach_auth_header(page, url)

        self.log.info(f"Navigating to agreement URL {url}", extra={"agreement_url": url})
        page.goto(url, wait_until="domcontentloaded")

        with page.expect_navigation(wait_until="networkidle"):
            page.evaluate(SUBMIT_VIEW_AGREEMENT_SCRIPT)

        self.log.info("Generating PDF", extra={"output_path": output_path})
        page.pdf(
            path=output_path,
            format=PDF_FORMAT,
            print_background=True,
            margin=PDF_MARGINS,
        )

    def _attach_auth_header(self, page: Any, url: str) -> None:
        """Send the auth token on requests to the agreement host only."""
        token = mint_auth_token(
            self.jwt_secret,
            source=self.token_source,
            ttl_seconds=self.token_ttl_seconds,
        )
        target_host = urlparse(url).hostname

        def _route(route: Any, request: Any) -> None:
            if urlparse(request.url).hostname == target_host:
                route.continue_(headers={**request.headers, AUTH_HEADER: token})
            else:
                route.continue_()

        page.route("**/*", _route)
