import asyncio
from typing import Any, Dict, List

from app.features.reports.schemas.report import NewReport, ReportOut
from app.features.reports.services.axe import AxeService
from app.features.reports.services.browser import BrowserService
from app.features.reports.services.scoring import summarize
from app.features.reports.services.store import ReportStore
from app.platform.errors import InvalidInput
from app.platform.logger import get_logger
from app.platform.utils.url_validator import validate_url

logger = get_logger(__name__)


class ScanService:
    """
    Scan pipeline for one URL:

    1. Validate the URL
    2. Open a browser session, load the page, run axe-core
    3. Close the session (on every path)
    4. Score and store the report

    Nothing is stored unless every step succeeds.
    """

    def __init__(self, store: ReportStore, browser: BrowserService, axe: AxeService):
        self.store = store
        self.browser = browser
        self.axe = axe

    async def run_scan(self, url: str, owner_id: str) -> ReportOut:
        is_valid, url_str, error_message = validate_url(url)
        if not is_valid:
            logger.warning(f"Rejected scan request for {url!r}: {error_message}")
            raise InvalidInput(f"Invalid URL: {error_message}")

        logger.info(f"Starting scan: url={url_str}, user_id={owner_id}")

        # WebDriver is blocking; keep it off the event loop
        axe_results = await asyncio.to_thread(self._audit_page, url_str)

        summary = summarize(axe_results)
        logger.info(
            f"Scan complete for {url_str}: {summary.violations} violations, "
            f"score {summary.accessibility_score}/100"
        )

        return await self.store.create(
            NewReport(
                user_id=owner_id,
                url=url_str,
                axe_results=axe_results,
                summary=summary,
            )
        )

    def _audit_page(self, url: str) -> Dict[str, List[Dict[str, Any]]]:
        # Fetch the axe source before taking a browser session
        self.axe.load_source()

        with self.browser.session() as driver:
            self.browser.navigate(driver, url)
            return self.axe.analyze(driver)
