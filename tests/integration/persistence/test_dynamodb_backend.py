"""Integration tests for DynamoDBStore and the workflow against LocalStack."""

from __future__ import annotations

import pytest

from approvalflow.core.config import AppSettings, DynamoDBConfig, RedisConfig
from approvalflow.models.schema import REQUESTS, validate_store_schema
from approvalflow.persistence.dynamodb_backend import DynamoDBStore
from approvalflow.workflow.context import WorkflowContext
from approvalflow.workflow.service import ApprovalService
from tests.integration.conftest import LOCALSTACK_URL, skip_no_localstack


@skip_no_localstack
@pytest.mark.integration
class TestDynamoDBIntegration:
    @pytest.fixture
    def store(self, seeded_tables):
        return DynamoDBStore(
            table_suffix=seeded_tables,
            region="us-east-1",
            endpoint_url=LOCALSTACK_URL,
        )

    def test_schema_matches(self, store):
        validate_store_schema(store)

    def test_seeded_roster(self, store):
        emails = {row["email"] for row in store.read_all("approvers")}
        assert "admin@example.com" in emails

    def test_submit_and_approve(self, store, seeded_tables):
        settings = AppSettings(
            dynamodb=DynamoDBConfig(table_suffix=seeded_tables, endpoint_url=LOCALSTACK_URL),
            redis=RedisConfig(enabled=False),
        )
        service = ApprovalService(WorkflowContext.build(store, settings=settings))
        result = service.submit("it.user@example.com", {
            "requesterName": "Integration", "formType": "ISMS-FM-013 - VPN Access",
            "department": "Finance", "details": {"vpn": "full"},
        })
        assert result.ok, result.message
        assert service.process_approval("fin.lead@example.com", result.request_id, "Approve").ok
        assert store.read_row(REQUESTS, result.request_id)["status"] == "Approved"
