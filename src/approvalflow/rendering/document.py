"""HTML rendering of finalized requests for the helpdesk hand-off."""

from __future__ import annotations

import json
from html import escape
from typing import Any

from approvalflow.models.records import ApprovalRequest


def _parse(text: str) -> dict[str, Any]:
    try:
        value = json.loads(text or "{}")
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {"value": value}


def _table(title: str, values: dict[str, Any]) -> str:
    if not values:
        return ""
    rows = "".join(
        f"<tr><th align='left'>{escape(str(k))}</th><td>{escape(_cell(v))}</td></tr>"
        for k, v in values.items()
    )
    return f"<h3>{escape(title)}</h3><table border='1' cellpadding='4'>{rows}</table>"


def _cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return "" if value is None else str(value)


class HtmlDocumentRenderer:
    """IDocumentRenderer producing a standalone UTF-8 HTML document."""

    def __init__(self, company_name: str = "") -> None:
        self._company_name = company_name

    def render(self, request: ApprovalRequest) -> bytes:
        summary = {
            "Request ID": request.request_id,
            "Form Type": request.form_type,
            "Submitted": request.request_timestamp.isoformat(),
            "Requester": f"{request.requester_name} <{request.requester_email}>",
            "Department": request.department,
            "Sub-Department": request.sub_department or "-",
            "Status": request.status.value,
        }
        history_rows = "".join(
            "<tr>"
            f"<td>{escape(h.timestamp.isoformat())}</td>"
            f"<td>{escape(h.approver_email)}</td>"
            f"<td>{escape(h.action)}</td>"
            f"<td>{escape(h.notes)}</td>"
            "</tr>"
            for h in request.approval_history
        )
        body = (
            f"<h1>{escape(self._company_name)}</h1>"
            f"<h2>{escape(request.form_type)}</h2>"
            + _table("Request", summary)
            + _table("Details", _parse(request.details))
            + _table("IT Review", _parse(request.it_review_details))
            + "<h3>Approval History</h3><table border='1' cellpadding='4'>"
            "<tr><th>When</th><th>Approver</th><th>Action</th><th>Notes</th></tr>"
            f"{history_rows}</table>"
        )
        html = (
            "<!DOCTYPE html><html><head><meta charset='utf-8'>"
            f"<title>{escape(request.request_id)}</title></head>"
            f"<body>{body}</body></html>"
        )
        return html.encode("utf-8")
