"""Input validation for submissions and approval actions."""

from __future__ import annotations

import json
import re
from typing import Any

from approvalflow.audit.trail import strip_markup
from approvalflow.core.config import WorkflowConfig
from approvalflow.core.emails import is_valid_email
from approvalflow.core.exceptions import ValidationError
from approvalflow.models.commands import RequestDraft
from approvalflow.models.records import ApprovalAction
from approvalflow.workflow.settings_repo import RuntimeSettings

_REQUIRED_FIELDS = (
    ("requester_name", "requesterName", "Requester name is required."),
    ("form_type", "formType", "Form type is required."),
    ("department", "department", "Department is required."),
    ("details", "details", "Form details are required."),
)


def form_id_of(form_type: str, pattern: str) -> str | None:
    """Numeric form id captured by ``pattern`` (e.g. ``"011"``), or None."""
    match = re.match(pattern, (form_type or "").strip())
    return match.group(1) if match else None


def _details_text(details: Any) -> str:
    if isinstance(details, str):
        try:
            json.loads(details)
        except ValueError:
            raise ValidationError("Invalid form details format.", "details") from None
        return details
    try:
        return json.dumps(details)
    except (TypeError, ValueError):
        raise ValidationError("Invalid form details format.", "details") from None


def validate_draft(draft: RequestDraft, config: WorkflowConfig, runtime: RuntimeSettings) -> RequestDraft:
    """Return a sanitized copy of ``draft`` with ``details`` as JSON text."""
    for attr, name, message in _REQUIRED_FIELDS:
        value = getattr(draft, attr)
        if value is None or (isinstance(value, str) and not value.strip()) or value in ({}, []):
            raise ValidationError(message, name)

    clean = draft.model_copy(update={
        "requester_name": strip_markup(draft.requester_name),
        "form_type": draft.form_type.strip(),
        "department": strip_markup(draft.department),
        "sub_department": strip_markup(draft.sub_department),
    })

    form_id = form_id_of(clean.form_type, config.form_type_pattern)
    if form_id is None:
        raise ValidationError("Invalid form type format.", "formType")
    if form_id in runtime.disabled_forms:
        raise ValidationError(f"Form {clean.form_type} is currently disabled.", "formType")
    if not clean.requester_name:
        raise ValidationError("Requester name is required.", "requesterName")
    if len(clean.requester_name) > config.requester_name_max_length:
        raise ValidationError(
            f"Requester name is too long (max {config.requester_name_max_length} characters).",
            "requesterName",
        )
    if form_id in config.sub_department_required_forms and not clean.sub_department:
        raise ValidationError("Sub-department is required for this form type.", "subDepartment")

    return clean.model_copy(update={"details": _details_text(draft.details)})


def validate_approval_input(request_id: str | None, action: str | ApprovalAction | None,
                            next_approver_email: str | None) -> ApprovalAction:
    if not request_id or not request_id.strip():
        raise ValidationError("Request ID is required.", "requestId")

    parsed = action if isinstance(action, ApprovalAction) else ApprovalAction.parse(action)
    if parsed is None:
        raise ValidationError("Invalid action specified.", "action")

    if parsed is ApprovalAction.FORWARD:
        if not next_approver_email or not next_approver_email.strip():
            raise ValidationError("Next approver email is required for forwarding.", "nextApproverEmail")
        if not is_valid_email(next_approver_email):
            raise ValidationError("Invalid email format for next approver.", "nextApproverEmail")
    return parsed
