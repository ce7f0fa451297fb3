"""Tests for notification message payloads."""

from __future__ import annotations

from datetime import datetime, timezone

from approvalflow.models.records import ApprovalRequest, RequestStatus
from approvalflow.notifications.templates import MessageBuilder, render_html

REQUEST = ApprovalRequest(
    request_id="REQ-ISMS-FM-013-1", form_type="ISMS-FM-013 - VPN Access",
    request_timestamp=datetime(2024, 1, 15, tzinfo=timezone.utc), requester_name="Jane <Doe>",
    requester_email="jane@x.com", department="IT",
)

BUILDER = MessageBuilder("https://approvals.test/", "Acme")


def test_new_request_links_to_approvals():
    message = BUILDER.new_request(REQUEST)
    assert message["button_url"] == "https://approvals.test?page=approvals"
    assert "REQ-ISMS-FM-013-1" in message["subject"]
    assert message["details"]["Sub-Department"] == "-"


def test_it_review_subject():
    assert BUILDER.new_request(REQUEST, it_review=True)["subject"].startswith("IT Review Required")


def test_final_status_carries_notes():
    message = BUILDER.final_status(REQUEST, RequestStatus.REJECTED, "missing info")
    assert message["title"] == "Your Request has been Rejected"
    assert message["notes"] == "missing info"
    assert message["button_url"].endswith("page=my-requests")


def test_helpdesk_ticket_attachment():
    message = BUILDER.helpdesk_ticket(REQUEST, b"<html></html>")
    assert message["attachment"] == {
        "filename": "REQ-ISMS-FM-013-1.html", "content": b"<html></html>", "content_type": "text/html",
    }


def test_render_html_escapes():
    html = render_html(BUILDER.new_request(REQUEST))
    assert "Jane &lt;Doe&gt;" in html
    assert "Jane <Doe>" not in html
    assert "Acme" in html
