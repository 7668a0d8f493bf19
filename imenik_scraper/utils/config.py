import os

# Directory site
DIRECTORY_URL = os.environ.get("IMENIK_DIRECTORY_URL", "https://imenik.tportal.hr/")
SEARCH_INPUT_SELECTOR = os.environ.get("IMENIK_SEARCH_INPUT_SELECTOR", "#tko")
RESULT_CONTAINER_SELECTOR = "div.ImenikContainerInnerDetails.searchResultLevel3"
ADDRESS_SELECTOR = "ul.itemContactInfo li.secondColumn"
TELEPHONE_SELECTOR = ".imenikSearchResultsRight .imenikTelefon"
FULL_NAME_SELECTOR = ".resultsTitle"
PAGINATION_LINK_PREFIX = "show?action=pretraga&type=brzaPretraga&showResultsPage="

# Scraping
BATCH_SIZE = int(os.environ.get("BATCH_SIZE", "10"))
DEFAULT_TOTAL_PAGES = int(os.environ.get("DEFAULT_TOTAL_PAGES", "10"))
TYPING_DELAY_MS = int(os.environ.get("TYPING_DELAY_MS", "100"))
# 0 disables the timeout entirely (Playwright semantics).
NAVIGATION_TIMEOUT_MS = int(os.environ.get("NAVIGATION_TIMEOUT_MS", "0"))
MOBILE_PREFIX = "09"

# Browser
HEADLESS = os.environ.get("HEADLESS", "true").lower() == "true"
USER_AGENT = os.environ.get(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)
VIEWPORT = {
    "width": int(os.environ.get("VIEWPORT_WIDTH", "1280")),
    "height": int(os.environ.get("VIEWPORT_HEIGHT", "800")),
}
BLOCKED_RESOURCE_TYPES = {"image", "stylesheet", "font", "media"}
BLOCKED_DOMAINS = [
    "google-analytics.com",
    "googletagmanager.com",
    "doubleclick.net",
    "googlesyndication.com",
    "facebook.net",
    "gemius.pl",
    "dotmetrics.net",
]

# Files
NAME_LIST_FILE = os.environ.get("NAME_LIST_FILE", "names.json")
RESULTS_FILE = os.environ.get("RESULTS_FILE", "imenik-results.json")
CACHE_FILE = os.environ.get("CACHE_FILE", "cache.json")

# Elasticsearch sink; unset hosts means the sink is not configured
ELASTICSEARCH_HOSTS = os.environ.get("ELASTICSEARCH_HOSTS")
ELASTICSEARCH_INDEX_NAME = os.environ.get("ELASTICSEARCH_INDEX_NAME", "imenik_entries")
ELASTICSEARCH_CONNECT_RETRIES = int(os.environ.get("ELASTICSEARCH_CONNECT_RETRIES", "3"))
ELASTICSEARCH_RETRY_DELAY_SECONDS = float(os.environ.get("ELASTICSEARCH_RETRY_DELAY_SECONDS", "2"))

# Kafka log shipping
KAFKA_BROKER_URL = os.environ.get("KAFKA_BROKER_URL", "localhost:9092")
TOPIC_LOG_EVENTS = os.environ.get("KAFKA_LOGS_TOPIC", "log_events")

# Logging
LOG_DIR = os.environ.get("LOG_DIR", "logs")
LOG_FILENAME = os.environ.get("LOG_FILENAME", "imenik-scraper.log")
LOG_MAX_BYTES = int(os.environ.get("LOG_MAX_BYTES", 10 * 1024 * 1024))
LOG_BACKUP_COUNT = int(os.environ.get("LOG_BACKUP_COUNT", "3"))
