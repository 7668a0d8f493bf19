import logging
import sys
import os
from logging.handlers import RotatingFileHandler
from imenik_scraper.utils import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
# The status display swaps out the handler with this name while it is live
CONSOLE_HANDLER_NAME = 'console'


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "false").lower() == "true"


def _add_file_handler(root_logger: logging.Logger, formatter: logging.Formatter) -> str:
    os.makedirs(config.LOG_DIR, exist_ok=True)
    log_file_path = os.path.join(config.LOG_DIR, config.LOG_FILENAME)

    file_handler = RotatingFileHandler(
        log_file_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
    return log_file_path


def setup_app_logging(service_name: str, level: int = logging.INFO):
    """
    Sets up the entire logging system for the scraper.

    - Configures a console handler on stdout.
    - If LOG_TO_FILE is 'true', adds a rotating file handler under LOG_DIR.
    - If LOG_TO_KAFKA is 'true', imports and adds the KafkaLogHandler lazily so
      the Kafka client is only loaded when it is used.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers to avoid duplicates
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log = logging.getLogger(service_name)

    if _env_flag("LOG_TO_FILE"):
        try:
            log_file_path = _add_file_handler(root_logger, formatter)
            log.info(f"File logging has been ENABLED, writing to {log_file_path}")
        except OSError as e:
            log.error(f"Failed to open log file. File logging is DISABLED. Error: {e}")

    if _env_flag("LOG_TO_KAFKA"):
        try:
            from imenik_scraper.utils.kafka_log_handler import KafkaLogHandler

            kafka_handler = KafkaLogHandler(
                service_name=service_name,
                bootstrap_servers=config.KAFKA_BROKER_URL,
                topic=config.TOPIC_LOG_EVENTS)

            root_logger.addHandler(kafka_handler)
            log.info("Kafka logging has been ENABLED.")
        except Exception as e:
            log.critical(
                f"Failed to initialize KafkaLogHandler. Kafka logging is DISABLED. Error: {e}",
                exc_info=True
            )
    else:
        log.debug("Kafka logging is DISABLED.")
