"""Unit test fixtures: a seeded in-memory store and a wired WorkflowContext."""

from __future__ import annotations

import json

import pytest

from approvalflow.core.config import AppSettings, CacheConfig, NotifierConfig, WorkflowConfig
from approvalflow.models.records import Department
from approvalflow.models.schema import APPROVERS, DEPARTMENTS, IT_REVIEWERS, SETTINGS
from approvalflow.workflow.context import WorkflowContext
from approvalflow.workflow.service import ApprovalService
from tests.fakes import FixedClock, MemoryCacheBackend, MemoryStore, RecordingNotifier

ADMIN = "admin@x.com"
REQUESTER = "req@x.com"
IT_MANAGER = "it.mgr@x.com"
INFRA_LEAD = "a@x.com"
VP = "vp@x.com"
REVIEWER = "rev@x.com"
MANAGER = "mgr@x.com"
DIRECTOR = "dir@x.com"
HELPDESK = "help@x.com"

ROSTER = [
    {"email": ADMIN, "approverName": "Admin", "level": 1, "role": "Admin", "position": "Admin",
     "department": "HR", "subDepartment": "", "division": "Corporate"},
    {"email": IT_MANAGER, "approverName": "IT Manager", "level": 2, "role": "Approver", "position": "Manager",
     "department": "IT", "subDepartment": "", "division": "Tech"},
    {"email": INFRA_LEAD, "approverName": "Infra Lead", "level": 1, "role": "Approver", "position": "Lead",
     "department": "IT", "subDepartment": "Infra", "division": "Tech"},
    {"email": VP, "approverName": "Tech VP", "level": 10, "role": "Approver", "position": "VP",
     "department": "IT", "subDepartment": "", "division": "Tech"},
]

IT_CHAINS = [
    {"formId": "011", "reviewerEmail": REVIEWER, "managerEmail": MANAGER, "directorEmail": DIRECTOR},
]

DEPARTMENT_ROWS = [
    {"departmentId": Department.make_id("IT"), "department": "IT", "subDepartment": ""},
    {"departmentId": Department.make_id("IT", "Infra"), "department": "IT", "subDepartment": "Infra"},
    {"departmentId": Department.make_id("HR"), "department": "HR", "subDepartment": ""},
]


def seed(store: MemoryStore) -> MemoryStore:
    for row in ROSTER:
        store.append_row(APPROVERS, row)
    for row in IT_CHAINS:
        store.append_row(IT_REVIEWERS, row)
    for row in DEPARTMENT_ROWS:
        store.append_row(DEPARTMENTS, row)
    store.append_row(SETTINGS, {"name": "helpdeskEmail", "value": json.dumps(HELPDESK)})
    return store


def make_settings(**workflow) -> AppSettings:
    return AppSettings(
        cache=CacheConfig(enabled=True, ttl_seconds=300),
        workflow=WorkflowConfig(**workflow),
        notifier=NotifierConfig(provider="log", app_url="https://approvals.test", company_name="Acme"),
    )


@pytest.fixture
def store():
    return seed(MemoryStore())


@pytest.fixture
def cache_backend():
    return MemoryCacheBackend()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def ctx(store, cache_backend, clock, notifier):
    return WorkflowContext.build(store, cache_backend, settings=make_settings(), notifier=notifier, clock=clock)


@pytest.fixture
def service(ctx):
    return ApprovalService(ctx)


def draft(form_type: str = "ISMS-FM-010 - Server Access", department: str = "IT",
          sub_department: str = "", **overrides) -> dict:
    payload = {
        "requesterName": "Jane Doe",
        "formType": form_type,
        "department": department,
        "subDepartment": sub_department,
        "details": {"server": "db01"},
    }
    payload.update(overrides)
    return payload
