"""Factory for Selenium WebDriver instances."""

import logging
from collections.abc import Callable, Mapping

from selenium import webdriver
from selenium.webdriver.remote.webdriver import WebDriver

log = logging.getLogger(__name__)


def build_chrome(*, headless: bool) -> WebDriver:
    """Create a Chrome driver."""
    options = webdriver.ChromeOptions()
    options.add_argument("--start-maximized")
    options.add_argument("--disable-notifications")
    options.add_argument("--remote-allow-origins=*")
    if headless:
        options.add_argument("--headless=new")
        options.add_argument("--window-size=1920,1080")
    log.debug("Chrome arguments: %s", options.arguments)
    return webdriver.Chrome(options=options)


def build_firefox(*, headless: bool) -> WebDriver:
    """Create a Firefox driver."""
    options = webdriver.FirefoxOptions()
    if headless:
        options.add_argument("-headless")
    log.debug("Firefox arguments: %s", options.arguments)
    return webdriver.Firefox(options=options)


def build_edge(*, headless: bool) -> WebDriver:
    """Create an Edge driver."""
    options = webdriver.EdgeOptions()
    if headless:
        options.add_argument("--headless=new")
        options.add_argument("--window-size=1920,1080")
    log.debug("Edge arguments: %s", options.arguments)
    return webdriver.Edge(options=options)


BUILDERS: Mapping[str, Callable[..., WebDriver]] = {
    "chrome": build_chrome,
    "firefox": build_firefox,
    "edge": build_edge,
}


def create_driver(browser: str, *, headless: bool = False) -> WebDriver:
    """Create a WebDriver for the configured browser.

    Selenium Manager resolves the matching driver binary.

    Args:
        browser: Browser name (chrome, firefox or edge, any case)
        headless: Run the browser without a visible window

    Raises:
        ValueError: If the browser name is unsupported

    """
    name = browser.strip().lower()
    if (builder := BUILDERS.get(name)) is None:
        raise ValueError(
            f"Unsupported browser: '{browser}'. Valid options: {', '.join(BUILDERS)}"
        )

    log.info("Creating WebDriver for browser: %s (headless=%s)", name, headless)
    return builder(headless=headless)
