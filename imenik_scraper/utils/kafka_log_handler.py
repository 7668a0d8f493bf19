import logging
import json
import sys
from confluent_kafka import Producer


class KafkaLogHandler(logging.Handler):
    """
    Ships log records as JSON events to a Kafka topic so runs on several
    machines can be followed in one place.
    """
    def __init__(self, service_name: str, bootstrap_servers: str, topic: str):
        super().__init__()
        self.service_name = service_name
        self.topic = topic
        self.time_formatter = logging.Formatter('%(asctime)s', datefmt='%Y-%m-%d %H:%M:%S')
        self.producer = Producer({'bootstrap.servers': bootstrap_servers})

    def to_event(self, record: logging.LogRecord) -> dict:
        event = {
            "timestamp": self.time_formatter.formatTime(record, self.time_formatter.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "module": record.module,
            "funcName": record.funcName,
            "lineno": record.lineno,
        }
        if record.exc_info:
            event["exception"] = self.time_formatter.formatException(record.exc_info)
        return event

    def emit(self, record: logging.LogRecord):
        try:
            # produce() is non-blocking; poll() serves delivery callbacks.
            self.producer.produce(self.topic, value=json.dumps(self.to_event(record)).encode('utf-8'))
            self.producer.poll(0)
        except Exception as e:
            sys.stderr.write(f"KAFKA LOGGING FAILED (produce call): {e}\n")
            self.handleError(record)

    def close(self):
        # flush() blocks until outstanding events are delivered or the timeout passes.
        self.producer.flush(10)
        super().close()
