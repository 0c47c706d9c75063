import time
from contextlib import contextmanager
from typing import Iterator, Optional

import urllib3
from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.support.ui import WebDriverWait

from app.platform.config import settings
from app.platform.errors import NavigationError, NavigationTimeout, UpstreamUnavailable
from app.platform.logger import get_logger

logger = get_logger(__name__)

# Resources allowed to finish inside the idle window (pollers, beacons)
NETWORK_IDLE_MAX_RECENT = 2

# True once at most `maxRecent` resources finished in the last `idle_ms` milliseconds.
NETWORK_IDLE_SCRIPT = """
const idleMs = arguments[0];
const maxRecent = arguments[1];
if (document.readyState !== 'complete') return false;
const entries = performance.getEntriesByType('resource') || [];
const now = performance.now();
const recent = entries.filter(e => (now - (e.responseEnd || e.startTime)) <= idleMs);
return recent.length <= maxRecent;
"""


def _describe(error: Exception) -> str:
    return getattr(error, "msg", None) or str(error)


class BrowserService:
    """
    Hands out WebDriver sessions: remote (grid / browserless) when
    BROWSER_REMOTE_URL is set, local headless Chrome otherwise.
    """

    def __init__(
        self,
        remote_url: Optional[str] = None,
        chromedriver_path: Optional[str] = None,
        navigation_timeout: int = 30,
        script_timeout: int = 60,
        network_idle_ms: int = 500,
        viewport: tuple = (1200, 800),
    ):
        self.remote_url = remote_url
        self.chromedriver_path = chromedriver_path
        self.navigation_timeout = navigation_timeout
        self.script_timeout = script_timeout
        self.network_idle_ms = network_idle_ms
        self.viewport = viewport

    @classmethod
    def from_settings(cls) -> "BrowserService":
        return cls(
            remote_url=settings.BROWSER_REMOTE_URL,
            chromedriver_path=settings.CHROMEDRIVER_PATH,
            navigation_timeout=settings.NAVIGATION_TIMEOUT_SECONDS,
            script_timeout=settings.AUDIT_SCRIPT_TIMEOUT_SECONDS,
            network_idle_ms=settings.NETWORK_IDLE_MS,
            viewport=(settings.VIEWPORT_WIDTH, settings.VIEWPORT_HEIGHT),
        )

    def build_driver(self) -> webdriver.Remote:
        chrome_options = Options()
        chrome_options.add_argument('--headless=new')
        chrome_options.add_argument('--no-sandbox')
        chrome_options.add_argument('--disable-dev-shm-usage')
        chrome_options.add_argument(f'--window-size={self.viewport[0]},{self.viewport[1]}')

        try:
            if self.remote_url:
                driver = webdriver.Remote(command_executor=self.remote_url, options=chrome_options)
            elif self.chromedriver_path:
                driver_service = Service(executable_path=self.chromedriver_path)
                driver = webdriver.Chrome(service=driver_service, options=chrome_options)
            else:
                driver = webdriver.Chrome(options=chrome_options)
        # An unreachable grid surfaces from urllib3 (MaxRetryError) or the socket layer
        except (WebDriverException, urllib3.exceptions.HTTPError, OSError) as e:
            logger.error(f"Could not start browser session: {_describe(e)}")
            raise UpstreamUnavailable(f"Browser session unavailable: {_describe(e)}") from e

        try:
            driver.set_page_load_timeout(self.navigation_timeout)
            # axe.run inherits the session's script timeout
            driver.set_script_timeout(self.script_timeout)
        except (WebDriverException, urllib3.exceptions.HTTPError, OSError) as e:
            logger.error(f"Could not configure browser session: {_describe(e)}")
            self._quit(driver)
            raise UpstreamUnavailable(f"Browser session unavailable: {_describe(e)}") from e
        return driver

    @staticmethod
    def _quit(driver) -> None:
        try:
            driver.quit()
        except (WebDriverException, urllib3.exceptions.HTTPError, OSError) as e:
            logger.warning(f"Error while closing browser session: {_describe(e)}")

    @contextmanager
    def session(self) -> Iterator[webdriver.Remote]:
        """Yield a driver and always quit it, whatever happens inside the block."""
        driver = self.build_driver()
        try:
            yield driver
        finally:
            self._quit(driver)

    def navigate(self, driver: webdriver.Remote, url: str) -> None:
        """
        Load `url` and wait for the network to go idle. Load and idle wait
        together are bounded by navigation_timeout.
        """
        deadline = time.monotonic() + self.navigation_timeout
        try:
            logger.info(f"Navigating to {url}")
            driver.get(url)

            remaining = max(0.1, deadline - time.monotonic())
            WebDriverWait(driver, remaining, poll_frequency=0.25).until(
                lambda d: d.execute_script(
                    NETWORK_IDLE_SCRIPT, self.network_idle_ms, NETWORK_IDLE_MAX_RECENT
                ) is True
            )
        except TimeoutException as e:
            logger.warning(f"Navigation to {url} timed out after {self.navigation_timeout}s")
            raise NavigationTimeout(
                f"Timed out loading {url} after {self.navigation_timeout} seconds"
            ) from e
        except (WebDriverException, urllib3.exceptions.HTTPError, OSError) as e:
            logger.warning(f"Navigation to {url} failed: {_describe(e)}")
            raise NavigationError(f"Could not load {url}: {_describe(e)}") from e
