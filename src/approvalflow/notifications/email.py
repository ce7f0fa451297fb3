"""Email notifiers implementing INotifier."""

from __future__ import annotations

from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, Mapping

import boto3
import structlog
from botocore.exceptions import ClientError

from approvalflow.core.exceptions import ApprovalFlowError
from approvalflow.notifications.templates import render_html

logger = structlog.get_logger(__name__)


class NotificationError(ApprovalFlowError):
    """Outbound email could not be sent."""


class SESNotifier:
    """Production INotifier backed by Amazon SES."""

    def __init__(self, sender: str, sender_name: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._sender = formataddr((sender_name, sender)) if sender_name else sender
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("ses", **kwargs)

    def notify(self, recipient: str, message: Mapping[str, Any]) -> None:
        html_body = render_html(message)
        try:
            if message.get("attachment"):
                self._send_raw(recipient, message, html_body)
            else:
                self._client.send_email(
                    Source=self._sender,
                    Destination={"ToAddresses": [recipient]},
                    Message={
                        "Subject": {"Data": message.get("subject", "")},
                        "Body": {"Html": {"Data": html_body}},
                    },
                )
        except ClientError as exc:
            raise NotificationError(f"SES send to {recipient!r} failed: {exc}") from exc

    def _send_raw(self, recipient: str, message: Mapping[str, Any], html_body: str) -> None:
        attachment = message["attachment"]
        mime = MIMEMultipart("mixed")
        mime["Subject"] = message.get("subject", "")
        mime["From"] = self._sender
        mime["To"] = recipient
        mime.attach(MIMEText(html_body, "html"))
        part = MIMEApplication(attachment["content"], Name=attachment["filename"])
        part["Content-Disposition"] = f'attachment; filename="{attachment["filename"]}"'
        mime.attach(part)
        self._client.send_raw_email(
            Source=self._sender,
            Destinations=[recipient],
            RawMessage={"Data": mime.as_string()},
        )


class LogNotifier:
    """INotifier that only logs; used in dev and as the default provider."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []

    def notify(self, recipient: str, message: Mapping[str, Any]) -> None:
        self.sent.append((recipient, dict(message)))
        logger.info("notification", recipient=recipient, subject=message.get("subject"),
                    attachment=bool(message.get("attachment")))
