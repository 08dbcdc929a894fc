import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

# Logger
from app.logging.utils import get_app_logger
logger = get_app_logger("app.sentry")

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

SENSITIVE_HEADERS = ('authorization', 'cookie', 'x-api-key', 'x-auth-token')


def init_sentry():
    """Initialize Sentry when SENTRY_ENABLED is set and a DSN is configured."""
    if not configs.SENTRY_ENABLED:
        logger.info("sentry_disabled")
        return

    if not configs.SENTRY_DSN:
        logger.warning("sentry_dsn_missing | SENTRY_ENABLED=true but SENTRY_DSN is empty")
        return

    sentry_sdk.init(
        dsn=configs.SENTRY_DSN,
        environment=configs.ENVIRONMENT,
        release=configs.SENTRY_RELEASE,
        traces_sample_rate=float(configs.SENTRY_TRACES_SAMPLE_RATE),
        profiles_sample_rate=float(configs.SENTRY_PROFILES_SAMPLE_RATE),
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        before_send=before_send_filter,
    )
    logger.info(f"sentry_initialized | environment={configs.ENVIRONMENT} release={configs.SENTRY_RELEASE}")


def before_send_filter(event, hint):
    """Strip credentials from request headers before the event leaves the process."""
    headers = event.get('request', {}).get('headers')
    if isinstance(headers, dict):
        for header in list(headers.keys()):
            if header.lower() in SENSITIVE_HEADERS:
                headers[header] = '[Filtered]'
    return event


def capture_exception(exception, **kwargs):
    if configs.SENTRY_ENABLED:
        sentry_sdk.capture_exception(exception, **kwargs)


def add_breadcrumb(message, category="custom", level="info", data=None):
    if configs.SENTRY_ENABLED:
        sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data or {})


def set_promotion_tags(promotion_id=None, customer_id=None):
    """Tag the current Sentry scope with the promotion being worked on."""
    if not configs.SENTRY_ENABLED:
        return
    if promotion_id is not None:
        sentry_sdk.set_tag("promotion_id", str(promotion_id))
    if customer_id is not None:
        sentry_sdk.set_tag("customer_id", str(customer_id))
