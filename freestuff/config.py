# freestuff/config.py
from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+sqlite:///./freestuff.db"

    LOG_LEVEL: str = "INFO"

    USER_AGENT: str = "SF RATS Bot/1.0 (https://sfrats.com)"
    HTTP_TIMEOUT: float = 20.0

    EVENTBRITE_API_KEY: Optional[str] = None
    EVENTBRITE_BASE_URL: str = "https://www.eventbriteapi.com/v3"
    CRAIGSLIST_URL: str = "https://sfbay.craigslist.org/search/sfc/zip"
    FUNCHEAP_URL: str = "https://sf.funcheap.com/category/free/"

    GEOCODER_URL: str = "https://nominatim.openstreetmap.org/search"
    GEOCODE_REGION: str = "San Francisco, CA"
    GEOCODE_MIN_INTERVAL: float = 1.0

    LOCAL_TIMEZONE: str = "America/Los_Angeles"

    SCRAPE_HOUR: int = 2
    SCRAPE_MINUTE: int = 0
    SCHEDULER_TIMEZONE: str = "America/Los_Angeles"

    RUN_LOG_DIR: str = "./logs"
    RUN_LOG_FILE: str = "scraper.log"
    RUN_LOG_TAIL: int = 10

    WEB_HOST: str = "0.0.0.0"
    WEB_PORT: int = 3001

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
