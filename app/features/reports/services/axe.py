from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from selenium.common.exceptions import WebDriverException

from app.platform.config import settings
from app.platform.errors import AuditEngineError, UpstreamUnavailable
from app.platform.logger import get_logger

logger = get_logger(__name__)

RESULT_GROUPS = ("violations", "passes", "incomplete", "inapplicable")

RUN_AXE_SCRIPT = """
const cb = arguments[arguments.length - 1];
if (!window.axe) return cb({error: 'axe not injected'});
axe.run(document)
  .then(r => cb({ok: true, r: {
    violations: r.violations,
    passes: r.passes,
    incomplete: r.incomplete,
    inapplicable: r.inapplicable
  }}))
  .catch(e => cb({error: (e && e.message) || String(e)}));
"""


class AxeService:
    """Runs axe-core inside a loaded WebDriver page."""

    def __init__(self, script_path: str, cdn_url: str):
        self.script_path = Path(script_path)
        self.cdn_url = cdn_url
        self._source: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "AxeService":
        return cls(script_path=settings.AXE_SCRIPT_PATH, cdn_url=settings.AXE_CDN_URL)

    def load_source(self) -> str:
        """axe.min.js from disk, downloading it once from the CDN if missing."""
        if self._source is not None:
            return self._source

        if self.script_path.exists() and self.script_path.stat().st_size > 0:
            self._source = self.script_path.read_text(encoding="utf-8")
            return self._source

        logger.info(f"Downloading axe-core from {self.cdn_url}")
        try:
            response = httpx.get(self.cdn_url, timeout=20.0, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Could not download axe-core: {e}")
            raise UpstreamUnavailable(f"axe-core script unavailable: {e}") from e

        self.script_path.parent.mkdir(parents=True, exist_ok=True)
        self.script_path.write_text(response.text, encoding="utf-8")
        self._source = response.text
        return self._source

    def analyze(self, driver) -> Dict[str, List[Dict[str, Any]]]:
        source = self.load_source()
        try:
            driver.execute_script(source)
            if not driver.execute_script("return !!window.axe;"):
                raise AuditEngineError("axe-core was injected but window.axe is missing")

            result = driver.execute_async_script(RUN_AXE_SCRIPT)
        except WebDriverException as e:
            logger.error(f"axe-core run failed: {e.msg or e}")
            raise AuditEngineError(f"Accessibility audit failed: {e.msg or e}") from e

        if not isinstance(result, dict) or result.get("error"):
            error = result.get("error") if isinstance(result, dict) else "unexpected axe result"
            raise AuditEngineError(f"axe.run failed: {error}")

        raw = result.get("r") or {}
        return {group: list(raw.get(group) or []) for group in RESULT_GROUPS}
