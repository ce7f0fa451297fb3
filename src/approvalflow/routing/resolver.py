"""RoutingResolver: picks approvers from the cached roster and IT-chain map."""

from __future__ import annotations

from typing import Iterable

from approvalflow.cache.data_cache import DataCache
from approvalflow.core.emails import normalize_email
from approvalflow.core.exceptions import ConfigurationError, NotFoundError
from approvalflow.models.records import Approver, ApproverRole, ITReviewChain, UserRole


class RoutingResolver:
    """Approver routing over ``DataCache`` reads.

    Nothing here is authoritative for a mutation: the engine re-reads the
    request row itself and only asks the resolver *who* should act next.
    """

    def __init__(self, cache: DataCache, vp_level: int = 10) -> None:
        self._cache = cache
        self._vp_level = vp_level

    def resolve_initial_approver(self, department: str, sub_department: str = "") -> Approver:
        """Lowest-level roster row for an exact department/sub-department match.

        An empty ``sub_department`` only matches rows with no sub-department;
        there is no fallback from a sub-department to its department. Ties on
        level go to the earliest roster row.
        """
        department = (department or "").strip()
        sub_department = (sub_department or "").strip()
        if not department:
            raise NotFoundError("Approver", message="Department not provided.")

        candidates = [
            a for a in self._cache.approvers()
            if a.department.strip() == department and a.sub_department.strip() == sub_department
        ]
        if not candidates:
            if sub_department:
                message = (
                    f'No approver found for Sub-Department: "{sub_department}" '
                    f'in Department: "{department}".'
                )
            else:
                message = f'No approver found for Department: "{department}".'
            raise NotFoundError("Approver", f"{department}/{sub_department}", message)

        # min() keeps the first of equal keys, so roster order breaks ties
        return min(candidates, key=lambda a: a.level)

    def resolve_it_chain(self, form_id: str | None) -> ITReviewChain:
        chain = self._cache.it_review_chains().get((form_id or "").strip())
        if chain is None:
            raise ConfigurationError(f"IT approval chain not configured for form {form_id}.")
        return chain

    def resolve_vp_divisions(self, email: str) -> list[str]:
        """Divisions in which ``email`` holds a roster row at VP level or above."""
        email = normalize_email(email)
        if not email:
            return []

        def load() -> list[str]:
            return [
                a.division for a in self._cache.approvers()
                if normalize_email(a.email) == email and a.level >= self._vp_level and a.division
            ]

        return self._cache.vp_divisions(email, load)

    def division_for_department(self, department: str) -> str | None:
        return self._cache.department_divisions().get(department)

    def vp_emails(self, roster: Iterable[Approver] | None = None) -> set[str]:
        """Emails eligible for a VP-division cache entry, from ``roster`` or the cache."""
        if roster is None:
            roster = self._cache.approvers()
        return {normalize_email(a.email) for a in roster if a.level >= self._vp_level}

    def find_approver(self, email: str) -> Approver | None:
        target = normalize_email(email)
        for approver in self._cache.approvers():
            if normalize_email(approver.email) == target:
                return approver
        return None

    def role_for(self, email: str) -> UserRole:
        approver = self.find_approver(email)
        if approver is None:
            return UserRole.USER
        return UserRole.ADMIN if approver.role is ApproverRole.ADMIN else UserRole.APPROVER

    def is_admin(self, email: str) -> bool:
        return self.role_for(email) is UserRole.ADMIN

    def forwardable_approvers(self) -> list[Approver]:
        return [a for a in self._cache.approvers() if a.level > 1]

    def approver_name_for_department(self, department: str, sub_department: str = "") -> str:
        return self.resolve_initial_approver(department, sub_department).approver_name
