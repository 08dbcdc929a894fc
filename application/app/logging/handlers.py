"""
Logging handlers for the SFA promotions service.
Firehose-backed buffered handlers with local-file fallback.
"""
import logging
import os
import time
from logging.handlers import MemoryHandler

import boto3
from botocore.config import Config

from app.logging.config import LoggingConfig
from app.logging.formatters import AppLogsJSONFormatter, AuditLogsJSONFormatter

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

LOG_DEBUG_PRINTS = configs.LOG_DEBUG_PRINTS

def dbg(msg: str) -> None:
    """Handler-internal trace; a logger cannot be used from inside a handler."""
    if LOG_DEBUG_PRINTS:
        print(msg)

class FireHoseHandler(logging.Handler):
    """Kinesis Firehose sink with exponential backoff between attempts"""

    def __init__(self, stream_name: str):
        super().__init__()
        self.stream_name = stream_name
        self.client = boto3.client(
            "firehose",
            region_name=LoggingConfig.FIREHOSE_REGION_NAME,
            aws_access_key_id=LoggingConfig.FIREHOSE_ACCESS_KEY_ID,
            aws_secret_access_key=LoggingConfig.FIREHOSE_SECRET_ACCESS_KEY,
            config=Config(connect_timeout=10, read_timeout=30, retries={"max_attempts": 2}),
        )
        self.retry_count = LoggingConfig.FIREHOSE_RETRY_COUNT
        self.retry_delay = LoggingConfig.FIREHOSE_RETRY_DELAY

    def bulk_insert(self, records) -> bool:
        if not records:
            return True

        for attempt in range(self.retry_count):
            last_attempt = attempt == self.retry_count - 1
            try:
                response = self.client.put_record_batch(DeliveryStreamName=self.stream_name, Records=records)
                failed = response.get("FailedPutCount", 0)
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} total={len(records)} failed={failed}")
                if failed == 0:
                    return True
            except Exception as e:
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} error={e}")
            if not last_attempt:
                time.sleep(self.retry_delay * (2 ** attempt))
        return False


class BufferedFirehoseHandler(MemoryHandler):
    """Buffers formatted records and ships them as one batch on capacity or timeout."""

    def __init__(self, capacity: int, stream_name: str, formatter: logging.Formatter):
        target = FireHoseHandler(stream_name)
        super().__init__(capacity=capacity, target=target)
        self.stream_name = stream_name
        self.buffer_timeout = LoggingConfig.LOG_BUFFER_TIMEOUT
        self.last_flush = time.time()
        self.setFormatter(formatter)
        target.setFormatter(formatter)

    def shouldFlush(self, record):
        expired = time.time() - self.last_flush >= self.buffer_timeout
        return expired or len(self.buffer) >= self.capacity

    def flush(self):
        self.acquire()
        try:
            if self.target and self.buffer:
                records = [{"Data": self.format(record)} for record in self.buffer]
                ok = self.target.bulk_insert(records)
                dbg(f"[Buffer:{self.stream_name}] flushed count={len(records)} ok={ok}")
                self.buffer.clear()
                self.last_flush = time.time()
        finally:
            self.release()


_handlers = {}

def get_local_file_handler(name: str = 'app'):
    os.makedirs(LoggingConfig.LOG_DIR, exist_ok=True)
    handler = logging.FileHandler(os.path.join(LoggingConfig.LOG_DIR, f'{name}.log'))
    formatter = AuditLogsJSONFormatter() if name.startswith('audit') else AppLogsJSONFormatter()
    handler.setFormatter(formatter)
    return handler


def get_app_handler():
    if not LoggingConfig.FIREHOSE_ENABLED:
        return get_local_file_handler('app')
    if 'app' not in _handlers:
        stream = LoggingConfig.APP_LOGS_STREAM_NAME or 'dcc-sfa-promotions-app-logs'
        _handlers['app'] = BufferedFirehoseHandler(LoggingConfig.APP_LOGS_CAPACITY, stream, AppLogsJSONFormatter())
    return _handlers['app']


def get_audit_handler(method: str = ''):
    if not LoggingConfig.FIREHOSE_ENABLED:
        return get_local_file_handler('audit_logs_backup')
    if method == 'GET':
        key = 'audit_get'
        stream = LoggingConfig.AUDIT_LOGS_GET_STREAM_NAME or 'dcc-sfa-promotions-audit-get-logs'
    else:
        key = 'audit_all'
        stream = LoggingConfig.AUDIT_LOGS_STREAM_NAME or 'dcc-sfa-promotions-audit-logs'
    if key not in _handlers:
        _handlers[key] = BufferedFirehoseHandler(LoggingConfig.AUDIT_LOGS_CAPACITY, stream, AuditLogsJSONFormatter())
    return _handlers[key]
