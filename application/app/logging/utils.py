"""
Logging utilities for the SFA promotions service (FastAPI)
"""
import logging

from app.logging.config import LoggingConfig
from app.logging.handlers import get_app_handler, get_audit_handler, get_local_file_handler
from app.logging.filters import RequestContextFilter, BusinessContextFilter
from app.logging.slack_handler import slack_handler


def get_app_logger(name: str = 'sfa'):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    # one central handler when shipping to Firehose, one file per module otherwise
    handler = get_app_handler() if LoggingConfig.FIREHOSE_ENABLED else get_local_file_handler(name.replace('.', '_'))
    handler.addFilter(RequestContextFilter())
    handler.addFilter(BusinessContextFilter())
    logger.addHandler(handler)
    logger.addHandler(slack_handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def init_audit_logger(method: str = ''):
    logger_name = 'sfa.audit.get' if method.upper() == 'GET' else 'sfa.audit'
    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        handler = get_audit_handler(method.upper())
        handler.addFilter(RequestContextFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def initialize_logging():
    is_valid, message = LoggingConfig.is_valid_config()
    if not is_valid:
        print(f"Warning: {message}")
    print("Logging system initialized (SFA promotions)")
