"""Alert notifications for feedback that raised safety alerts."""
import logging
from typing import Any, Dict, List

import httpx
from config import Config, config as default_config
from events import ChangeEvent
from schemas import Severity

logger = logging.getLogger(__name__)

SEVERITY_ORDER = [Severity.LOW.value, Severity.MEDIUM.value, Severity.HIGH.value]


class AlertService:
    """Service to notify faculty about new safety alerts.

    Posts a Slack-compatible payload to the configured webhook, or logs the
    alert when no webhook is configured.
    """

    def __init__(self, settings: Config = default_config):
        """Initialize alert service."""
        self.webhook_url = settings.ALERT_WEBHOOK_URL
        self.enabled = settings.ALERT_ENABLED

    async def handle_alerts_created(self, event: ChangeEvent) -> None:
        """Change feed listener for alert inserts.

        Alerts of one submission are published together and each record
        carries its parent feedback under the "feedback" key.
        """
        if event.action != "insert" or not event.records:
            return
        feedback = event.records[0].get("feedback") or {}
        await self.send_alert(feedback, event.records)

    async def send_alert(
        self,
        feedback: Dict[str, Any],
        alerts: List[Dict[str, Any]]
    ) -> bool:
        """Send one notification for the alerts of a feedback record.

        Args:
            feedback: Stored feedback as a dict
            alerts: Stored alerts of that feedback as dicts

        Returns:
            True if the alert was delivered or logged, False otherwise
        """
        if not alerts:
            return False

        feedback_id = feedback.get("id")

        if not self.enabled:
            logger.info(
                f"Alert would be sent for feedback {feedback_id} "
                f"(alerting disabled in config)"
            )
            return True

        payload = self._build_alert_payload(feedback, alerts)

        try:
            if self.webhook_url:
                await self._send_webhook(payload)
            else:
                # Log alert since webhook not configured
                logger.warning(
                    f"ALERT: Feedback #{feedback_id} requires attention - "
                    f"{', '.join(a['alert_type'] for a in alerts)}"
                )

            return True

        except Exception as e:
            logger.error(f"Failed to send alert for feedback {feedback_id}: {e}")
            return False

    @staticmethod
    def highest_severity(alerts: List[Dict[str, Any]]) -> str:
        return max((a["severity"] for a in alerts), key=SEVERITY_ORDER.index)

    def _build_alert_payload(
        self,
        feedback: Dict[str, Any],
        alerts: List[Dict[str, Any]]
    ) -> dict:
        """Build alert payload for webhook.

        Args:
            feedback: Stored feedback as a dict
            alerts: Stored alerts as dicts

        Returns:
            Dictionary payload for webhook
        """
        if feedback.get("is_anonymous") or not feedback.get("student_name"):
            student = "Anonymous"
        else:
            student = feedback["student_name"]

        alert_lines = "\n".join(
            f"• {a['alert_type']} ({a['severity']})" for a in alerts
        )

        # Slack-compatible format
        return {
            "text": "🚨 Student Feedback Alert",
            "blocks": [
                {
                    "type": "header",
                    "text": {
                        "type": "plain_text",
                        "text": "🚨 Student Feedback Needs Review"
                    }
                },
                {
                    "type": "section",
                    "fields": [
                        {
                            "type": "mrkdwn",
                            "text": f"*Feedback ID:*\n{feedback.get('id')}"
                        },
                        {
                            "type": "mrkdwn",
                            "text": f"*Severity:*\n{self.highest_severity(alerts)}"
                        },
                        {
                            "type": "mrkdwn",
                            "text": f"*Student:*\n{student}"
                        },
                        {
                            "type": "mrkdwn",
                            "text": f"*Topic:*\n{feedback.get('topic')}"
                        }
                    ]
                },
                {
                    "type": "section",
                    "text": {
                        "type": "mrkdwn",
                        "text": f"*Alerts:*\n{alert_lines}"
                    }
                },
                {
                    "type": "section",
                    "text": {
                        "type": "mrkdwn",
                        "text": f"*Feedback:*\n{(feedback.get('message') or '')[:500]}"
                    }
                }
            ]
        }

    async def _send_webhook(self, payload: dict) -> None:
        """Send webhook notification.

        Args:
            payload: JSON payload to send

        Raises:
            httpx.HTTPError: If webhook delivery fails
        """
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.post(
                self.webhook_url,
                json=payload
            )
            response.raise_for_status()
            logger.info(f"Alert sent successfully to {self.webhook_url}")
