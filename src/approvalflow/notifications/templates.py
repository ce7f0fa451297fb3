"""Notification message payloads and their HTML rendering."""

from __future__ import annotations

from html import escape
from typing import Any, Mapping

from approvalflow.models.records import ApprovalRequest, RequestStatus


class MessageBuilder:
    """Builds the message mappings handed to ``INotifier.notify``."""

    def __init__(self, app_url: str = "", company_name: str = "") -> None:
        self._app_url = app_url.rstrip("/")
        self._company_name = company_name

    def _base(self, subject: str, title: str, main_message: str, details: dict[str, str],
              button_text: str, page: str) -> dict[str, Any]:
        return {
            "subject": subject,
            "title": title,
            "main_message": main_message,
            "details": details,
            "button_text": button_text,
            "button_url": f"{self._app_url}?page={page}",
            "company_name": self._company_name,
        }

    def new_request(self, request: ApprovalRequest, it_review: bool = False) -> dict[str, Any]:
        if it_review:
            subject = f"IT Review Required: Request #{request.request_id}"
            title = "Request for IT Review"
            main = ("The following request has been approved by the department head "
                    "and now requires your review.")
        else:
            subject = f"New Approval Request from {request.requester_name} (#{request.request_id})"
            title = "New Request to Approve"
            main = (f"A new request from {request.requester_name} requires your approval. "
                    "Please review the details below.")
        details = {
            "Request ID": request.request_id,
            "Form Type": request.form_type,
            "Requester": request.requester_name,
            "Department": request.department,
            "Sub-Department": request.sub_department or "-",
        }
        return self._base(subject, title, main, details, "View Request", "approvals")

    def final_status(self, request: ApprovalRequest, status: RequestStatus, notes: str = "") -> dict[str, Any]:
        message = self._base(
            f"Update on your request #{request.request_id}",
            f"Your Request has been {status.value}",
            f"Your request #{request.request_id} has been updated to: {status.value}.",
            {"Request ID": request.request_id},
            "View My Requests",
            "my-requests",
        )
        message["notes"] = notes or None
        return message

    def helpdesk_ticket(self, request: ApprovalRequest, document: bytes) -> dict[str, Any]:
        message = self._base(
            f"Approved Request: {request.form_type} (#{request.request_id})",
            "Approved Request for Processing",
            f"Request #{request.request_id} from {request.requester_name} has been fully approved.",
            {
                "Request ID": request.request_id,
                "Form Type": request.form_type,
                "Requester": f"{request.requester_name} <{request.requester_email}>",
                "Department": request.department,
            },
            "Open Approvals",
            "approvals",
        )
        message["attachment"] = {
            "filename": f"{request.request_id}.html",
            "content": document,
            "content_type": "text/html",
        }
        return message


def render_html(message: Mapping[str, Any]) -> str:
    """Render a message mapping as a minimal HTML email body."""
    rows = "".join(
        f"<tr><th align='left'>{escape(str(k))}</th><td>{escape(str(v))}</td></tr>"
        for k, v in (message.get("details") or {}).items()
    )
    notes = message.get("notes")
    notes_html = f"<p><strong>Notes:</strong> {escape(str(notes))}</p>" if notes else ""
    button = ""
    if message.get("button_url"):
        button = (f"<p><a href='{escape(message['button_url'], quote=True)}'>"
                  f"{escape(message.get('button_text') or 'Open')}</a></p>")
    return (
        "<html><body>"
        f"<h2>{escape(message.get('title', ''))}</h2>"
        f"<p>{escape(message.get('main_message', ''))}</p>"
        f"<table>{rows}</table>{notes_html}{button}"
        f"<p><small>{escape(message.get('company_name', ''))}</small></p>"
        "</body></html>"
    )
