import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger("browser_service")

CHROME_ARGUMENTS = (
    "--headless",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
)


@dataclass
class BrowserSession:
    driver: webdriver.Chrome
    port: int


class BrowserService:
    """Launches one headless Chrome per audit and exposes its DevTools port to Lighthouse."""

    def __init__(self, chromedriver_path: Optional[str] = None):
        self.chromedriver_path = chromedriver_path if chromedriver_path is not None else settings.CHROMEDRIVER_PATH

    def build_driver(self) -> webdriver.Chrome:
        chrome_options = Options()
        for argument in CHROME_ARGUMENTS:
            chrome_options.add_argument(argument)

        if self.chromedriver_path:
            driver_service = Service(executable_path=self.chromedriver_path)
            return webdriver.Chrome(service=driver_service, options=chrome_options)
        return webdriver.Chrome(options=chrome_options)

    @staticmethod
    def debugging_port(driver: webdriver.Chrome) -> int:
        """Read the DevTools port chromedriver assigned, from ``goog:chromeOptions.debuggerAddress``."""
        address = (driver.capabilities.get("goog:chromeOptions") or {}).get("debuggerAddress")
        if not address:
            raise RuntimeError("Chrome did not report a DevTools debugger address")
        return int(address.rsplit(":", 1)[1])

    @asynccontextmanager
    async def session(self) -> AsyncIterator[BrowserSession]:
        """
        Yield an exclusively owned browser. The driver is quit exactly once,
        whether the body returns, raises, or is cancelled.
        """
        driver = await asyncio.to_thread(self.build_driver)
        try:
            port = self.debugging_port(driver)
            logger.debug(f"Chrome started with DevTools on port {port}")
            yield BrowserSession(driver=driver, port=port)
        finally:
            try:
                await asyncio.to_thread(driver.quit)
            except Exception as e:
                logger.warning(f"Failed to quit Chrome cleanly: {e}")
