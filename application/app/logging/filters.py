"""
Logging filters that copy request/business context onto each record
"""
import logging
import uuid
from app.middlewares.request_context import request_context


class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = request_context.request_id or str(uuid.uuid4())
        record.request_method = request_context.request_method or ''
        record.request_path = request_context.request_path or ''
        record.user_id = request_context.user_id or ''
        return True


class BusinessContextFilter(logging.Filter):
    def filter(self, record):
        record.customer_id = request_context.customer_id or ''
        record.promotion_id = request_context.promotion_id or ''
        record.depot_id = request_context.depot_id or ''
        return True
