from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from webdriver_manager.chrome import ChromeDriverManager

from .. import config


def create_driver(*, headless: bool | None = None):
    """
    Fresh Chrome for one scenario. Window size is fixed so drag offsets and
    hover targets behave the same headless and headed.
    """
    options = Options()
    if config.HEADLESS if headless is None else headless:
        options.add_argument("--headless=new")
    options.add_argument("--window-size=1920,1080")
    options.add_argument("--disable-notifications")

    driver = webdriver.Chrome(service=Service(ChromeDriverManager().install()), options=options)
    # 0 by default; lookups go through explicit waits
    driver.implicitly_wait(config.IMPLICIT_WAIT)
    return driver
