"""Administrative operations: roster, IT-review chains and runtime settings."""

from __future__ import annotations

from typing import Any

import structlog

from approvalflow.audit.trail import strip_markup
from approvalflow.core.emails import is_valid_email, normalize_email
from approvalflow.core.exceptions import (
    AuthorizationError,
    DuplicateRowError,
    NotFoundError,
    ValidationError,
)
from approvalflow.models.commands import (
    ApproverInput,
    ITReviewChainInput,
    ManageAction,
    SettingsUpdate,
)
from approvalflow.models.records import Approver, ApproverRole, ITReviewChain
from approvalflow.models.schema import APPROVERS, IT_REVIEWERS
from approvalflow.workflow.context import WorkflowContext
from approvalflow.workflow.settings_repo import RuntimeSettings

logger = structlog.get_logger(__name__)

_CHAIN_STAGES = (
    ("reviewer_email", "reviewerEmail"),
    ("manager_email", "managerEmail"),
    ("director_email", "directorEmail"),
)


def _parse_action(action: str | ManageAction) -> ManageAction:
    try:
        return ManageAction(str(action).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid action: {action}", "action") from None


class AdminOperations:
    """Admin-only mutations, each run under the global guard.

    The admin check for a mutation reads the roster fresh from the store so a
    just-revoked admin cannot act on a stale cached role. Cache invalidation
    happens before the guard is released.
    """

    def __init__(self, ctx: WorkflowContext) -> None:
        self._ctx = ctx

    # ---- approvers ----

    def manage_approver(self, actor: str, action: str | ManageAction, data: ApproverInput) -> Approver:
        ctx = self._ctx
        verb = _parse_action(action)
        with ctx.guard.hold("manage_approver", actor):
            roster = self._fresh_roster()
            self._require_admin(actor, roster)
            vp_before = ctx.resolver.vp_emails()

            match verb:
                case ManageAction.ADD:
                    approver = self._approver_from_input(data)
                    if self._roster_row(roster, approver.email) is not None:
                        raise ValidationError(f"Approver with email {approver.email} already exists.", "email")
                    self._append(APPROVERS, approver.model_dump(by_alias=True, mode="json"), approver.email)
                case ManageAction.UPDATE:
                    approver = self._approver_from_input(data)
                    existing = self._roster_row(roster, data.original_email or data.email)
                    if existing is None:
                        raise NotFoundError("Approver", data.original_email or data.email,
                                            "Approver to update not found.")
                    row = approver.model_dump(by_alias=True, mode="json")
                    if normalize_email(existing.email) == approver.email:
                        ctx.store.write_cells(APPROVERS, existing.email,
                                              {k: v for k, v in row.items() if k != "email"})
                    else:
                        if self._roster_row(roster, approver.email) is not None:
                            raise ValidationError(f"Approver with email {approver.email} already exists.", "email")
                        self._append(APPROVERS, row, approver.email)
                        ctx.store.delete_row(APPROVERS, existing.email)
                case ManageAction.DELETE:
                    approver = self._roster_row(roster, data.email)
                    if approver is None:
                        raise NotFoundError("Approver", data.email, "Approver to delete not found.")
                    ctx.store.delete_row(APPROVERS, approver.email)

            vp_after = ctx.resolver.vp_emails(self._fresh_roster())
            ctx.cache.invalidate_roster(vp_before | vp_after)
            ctx.audit.record("manage_approver", actor, "success", action=verb.value, email=approver.email)
        return approver

    def list_approvers(self, actor: str) -> list[Approver]:
        self._require_admin(actor, self._ctx.cache.approvers())
        return self._fresh_roster()

    # ---- IT review chains ----

    def manage_it_review_chain(self, actor: str, action: str | ManageAction,
                               data: ITReviewChainInput) -> ITReviewChain:
        ctx = self._ctx
        verb = _parse_action(action)
        with ctx.guard.hold("manage_it_review_chain", actor):
            self._require_admin(actor, self._fresh_roster())
            form_id = data.form_id.strip()

            match verb:
                case ManageAction.ADD:
                    chain = self._chain_from_input(data)
                    if ctx.store.read_row(IT_REVIEWERS, form_id) is not None:
                        raise ValidationError(f"IT review chain for form {form_id} already exists.", "formId")
                    self._append(IT_REVIEWERS, chain.model_dump(by_alias=True), form_id)
                case ManageAction.UPDATE:
                    chain = self._chain_from_input(data)
                    original = (data.original_form_id or form_id).strip()
                    if ctx.store.read_row(IT_REVIEWERS, original) is None:
                        raise NotFoundError("ITReviewChain", original, "IT review chain to update not found.")
                    row = chain.model_dump(by_alias=True)
                    if original == form_id:
                        ctx.store.write_cells(IT_REVIEWERS, form_id,
                                              {k: v for k, v in row.items() if k != "formId"})
                    else:
                        if ctx.store.read_row(IT_REVIEWERS, form_id) is not None:
                            raise ValidationError(f"IT review chain for form {form_id} already exists.", "formId")
                        self._append(IT_REVIEWERS, row, form_id)
                        ctx.store.delete_row(IT_REVIEWERS, original)
                case ManageAction.DELETE:
                    existing = ctx.store.read_row(IT_REVIEWERS, form_id)
                    if existing is None:
                        raise NotFoundError("ITReviewChain", form_id, "IT review chain to delete not found.")
                    chain = ITReviewChain.model_validate(existing)
                    ctx.store.delete_row(IT_REVIEWERS, form_id)

            ctx.cache.invalidate_it_chains()
            ctx.audit.record("manage_it_review_chain", actor, "success", action=verb.value, form_id=chain.form_id)
        return chain

    def list_it_review_chains(self, actor: str) -> list[ITReviewChain]:
        self._require_admin(actor, self._ctx.cache.approvers())
        return [ITReviewChain.model_validate(r) for r in self._ctx.store.read_all(IT_REVIEWERS)]

    # ---- settings ----

    def update_settings(self, actor: str, update: SettingsUpdate) -> RuntimeSettings:
        ctx = self._ctx
        values = update.model_dump(by_alias=True, exclude_none=True, exclude={"it_review_flows"})
        if "helpdeskEmail" in values:
            values["helpdeskEmail"] = values["helpdeskEmail"].strip()
            if values["helpdeskEmail"] and not is_valid_email(values["helpdeskEmail"]):
                raise ValidationError("Invalid helpdesk email.", "helpdeskEmail")
        for name in ("disabledForms", "itReviewForms"):
            if name in values:
                values[name] = [f.strip() for f in values[name] if f and f.strip()]

        with ctx.guard.hold("update_settings", actor):
            self._require_admin(actor, self._fresh_roster())
            ctx.settings.save(values)

            updated_flows = 0
            for flow in update.it_review_flows or []:
                form_id = flow.form_id.strip()
                if not form_id or ctx.store.read_row(IT_REVIEWERS, form_id) is None:
                    logger.warning("it_flow_update_skipped", form_id=form_id)
                    continue
                ctx.store.write_cells(IT_REVIEWERS, form_id, {
                    alias: getattr(flow, attr).strip() for attr, alias in _CHAIN_STAGES
                })
                updated_flows += 1
            if update.it_review_flows is not None:
                ctx.cache.invalidate_it_chains()

            ctx.audit.record("update_settings", actor, "success",
                             settings=sorted(values), it_flows=updated_flows)
        return ctx.settings.load()

    def get_settings(self, actor: str) -> dict[str, Any]:
        self._require_admin(actor, self._ctx.cache.approvers())
        view = self._ctx.settings.load().model_dump(by_alias=True)
        view["itReviewFlows"] = [
            chain.model_dump(by_alias=True) for chain in self._ctx.cache.it_review_chains().values()
        ]
        return view

    # ---- helpers ----

    def _fresh_roster(self) -> list[Approver]:
        roster = []
        for row in self._ctx.store.read_all(APPROVERS):
            try:
                roster.append(Approver.model_validate(row))
            except ValueError:
                logger.warning("roster_row_skipped", email=row.get("email"))
        return roster

    @staticmethod
    def _roster_row(roster: list[Approver], email: str) -> Approver | None:
        target = normalize_email(email)
        return next((a for a in roster if normalize_email(a.email) == target), None)

    def _require_admin(self, actor: str, roster: list[Approver]) -> None:
        approver = self._roster_row(roster, actor) if actor else None
        if approver is None or approver.role is not ApproverRole.ADMIN:
            raise AuthorizationError("Admin access required.")

    def _append(self, table: str, row: dict[str, Any], key: str) -> None:
        try:
            self._ctx.store.append_row(table, row)
        except DuplicateRowError:
            raise ValidationError(f"Entry {key} already exists.") from None

    @staticmethod
    def _approver_from_input(data: ApproverInput) -> Approver:
        email = normalize_email(data.email)
        if not is_valid_email(email):
            raise ValidationError("A valid approver email is required.", "email")
        name = strip_markup(data.approver_name)
        if not name:
            raise ValidationError("Approver name is required.", "approverName")
        department = strip_markup(data.department)
        if not department:
            raise ValidationError("Department is required.", "department")
        if data.level < 1:
            raise ValidationError("Approver level must be a positive number.", "level")
        return Approver(
            approver_name=name,
            email=email,
            level=data.level,
            role=data.role,
            position=strip_markup(data.position),
            department=department,
            sub_department=strip_markup(data.sub_department),
            division=strip_markup(data.division),
        )

    @staticmethod
    def _chain_from_input(data: ITReviewChainInput) -> ITReviewChain:
        form_id = data.form_id.strip()
        if not form_id:
            raise ValidationError("Form ID is required.", "formId")
        emails = {}
        for attr, alias in _CHAIN_STAGES:
            value = getattr(data, attr).strip()
            if not is_valid_email(value):
                raise ValidationError(f"A valid {alias} is required.", alias)
            emails[attr] = value
        return ITReviewChain(form_id=form_id, **emails)
