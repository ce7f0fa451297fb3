"""Runtime settings stored in the ``settings`` table, layered over config defaults."""

from __future__ import annotations

import json
from typing import Any, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, Field

from approvalflow.core.config import WorkflowConfig
from approvalflow.core.protocols import IStore
from approvalflow.models.schema import SETTINGS

logger = structlog.get_logger(__name__)


class RuntimeSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    helpdesk_email: str = Field(default="", alias="helpdeskEmail")
    disabled_forms: list[str] = Field(default_factory=list, alias="disabledForms")
    it_review_forms: list[str] = Field(default_factory=list, alias="itReviewForms")


SETTING_NAMES = frozenset(f.alias for f in RuntimeSettings.model_fields.values())


class SettingsRepository:
    """Reads are always fresh from the store; settings drive mutation decisions."""

    def __init__(self, store: IStore, defaults: WorkflowConfig) -> None:
        self._store = store
        self._defaults = defaults

    def load(self) -> RuntimeSettings:
        values: dict[str, Any] = {
            "helpdeskEmail": self._defaults.helpdesk_email,
            "itReviewForms": list(self._defaults.it_review_forms),
        }
        for row in self._store.read_all(SETTINGS):
            name = row.get("name")
            if name not in SETTING_NAMES:
                continue
            try:
                values[name] = json.loads(row.get("value") or "null")
            except ValueError:
                logger.warning("setting_unparseable", name=name)
        return RuntimeSettings.model_validate({k: v for k, v in values.items() if v is not None})

    def save(self, values: Mapping[str, Any]) -> None:
        """Upsert each named setting as JSON text."""
        for name, value in values.items():
            text = json.dumps(value)
            if self._store.read_row(SETTINGS, name) is None:
                self._store.append_row(SETTINGS, {"name": name, "value": text})
            else:
                self._store.write_cell(SETTINGS, name, "value", text)

