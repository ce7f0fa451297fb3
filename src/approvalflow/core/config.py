"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """DynamoDB store configuration."""

    model_config = {"env_prefix": "APPROVALFLOW_DYNAMO_"}

    table_prefix: str = "approvalflow"
    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis cache backend configuration."""

    model_config = {"env_prefix": "APPROVALFLOW_REDIS_"}

    enabled: bool = True
    host: str = "localhost"
    port: int = 6379
    db: int = 0


class CacheConfig(BaseSettings):
    """Reference-data cache behaviour."""

    model_config = {"env_prefix": "APPROVALFLOW_CACHE_"}

    enabled: bool = True
    ttl_seconds: int = 300  # 5 minutes


class WorkflowConfig(BaseSettings):
    """Approval workflow rules and limits."""

    model_config = {"env_prefix": "APPROVALFLOW_WORKFLOW_"}

    lock_timeout_seconds: float = 30.0
    notes_max_length: int = 1000
    requester_name_max_length: int = 100
    vp_level: int = 10
    form_type_pattern: str = r"^ISMS-FM-(\d{3})"
    it_review_forms: list[str] = ["010", "011", "012", "009", "014", "026"]
    sub_department_required_forms: list[str] = ["011", "012", "009", "014", "026"]
    default_page_size: int = 20
    max_page_size: int = 100
    helpdesk_email: str = ""  # overridden by the runtime "helpdeskEmail" setting


class NotifierConfig(BaseSettings):
    """Outbound email notification configuration."""

    model_config = {"env_prefix": "APPROVALFLOW_NOTIFY_"}

    provider: Literal["log", "ses"] = "log"
    sender: str = "approvals@example.com"
    sender_name: str = "Approval System Notifier"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    app_url: str = "http://localhost:8000"
    company_name: str = "Ocean Life Insurance"


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "APPROVALFLOW_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False
    validate_schema_on_startup: bool = True

    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    cache: CacheConfig = CacheConfig()
    workflow: WorkflowConfig = WorkflowConfig()
    notifier: NotifierConfig = NotifierConfig()
