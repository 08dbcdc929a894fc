"""
Request context utilities for FastAPI using contextvars
"""
from contextvars import ContextVar
import uuid


class RequestContext:
    def __init__(self):
        self.request_id: str | None = None
        self.user_id: str | None = None
        self.customer_id: str | None = None
        self.promotion_id: str | None = None
        self.depot_id: str | None = None
        self.module_name: str | None = None
        self.request_method: str | None = None
        self.request_path: str | None = None


_request_context_var: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def _current() -> RequestContext:
    ctx = _request_context_var.get()
    if ctx is None:
        ctx = RequestContext()
        _request_context_var.set(ctx)
    return ctx


class _RequestContextProxy:
    def __getattr__(self, name):
        return getattr(_current(), name)

    def __setattr__(self, name, value):
        setattr(_current(), name, value)


request_context = _RequestContextProxy()


def clear_request_context():
    _request_context_var.set(RequestContext())


def create_request_id() -> str:
    rid = str(uuid.uuid4())
    request_context.request_id = rid
    return rid


def set_business_context(customer_id=None, promotion_id=None, depot_id=None):
    """Expose the entities of the current request to the logging filters."""
    if customer_id is not None:
        request_context.customer_id = str(customer_id)
    if promotion_id is not None:
        request_context.promotion_id = str(promotion_id)
    if depot_id is not None:
        request_context.depot_id = str(depot_id)
