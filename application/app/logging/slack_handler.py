import os
import logging
import requests
from datetime import datetime, timezone


class SlackErrorHandler(logging.Handler):
    """Posts ERROR and CRITICAL records to a Slack webhook"""

    def __init__(self):
        super().__init__(level=logging.ERROR)
        self.webhook = os.getenv('SLACK_WEBHOOK_URL')
        self.enabled = bool(self.webhook) and os.getenv('SLACK_ALERTS_ENABLED', 'false').lower() == 'true'

    def build_text(self, record) -> str:
        env = os.getenv('APPLICATION_ENVIRONMENT', 'LOCAL').upper()
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        lines = [
            f":rotating_light: {env} dcc-sfa-promotions",
            f"- Timestamp: {ts}",
            f"- Level: *{record.levelname}*",
            f"- Logger: {record.name}",
            f"- Location: {record.module}.{record.funcName}:{record.lineno}",
            "```" + record.getMessage() + "```",
        ]
        return "\n".join(lines)

    def emit(self, record):
        if not self.enabled:
            return
        try:
            requests.post(self.webhook, json={"text": self.build_text(record)}, timeout=2)
        except Exception:
            self.handleError(record)


slack_handler = SlackErrorHandler()
