"""Explicit dependency container for the workflow operations."""

from __future__ import annotations

from dataclasses import dataclass

from approvalflow.audit.trail import AuditTrail
from approvalflow.cache.data_cache import DataCache
from approvalflow.core.clock import RequestIdGenerator, SystemClock
from approvalflow.core.config import AppSettings, WorkflowConfig
from approvalflow.core.protocols import (
    ICacheBackend,
    IClock,
    IDocumentRenderer,
    IIdGenerator,
    INotifier,
    IStore,
)
from approvalflow.notifications.email import LogNotifier, SESNotifier
from approvalflow.notifications.templates import MessageBuilder
from approvalflow.rendering.document import HtmlDocumentRenderer
from approvalflow.routing.resolver import RoutingResolver
from approvalflow.workflow.guard import ConcurrencyGuard
from approvalflow.workflow.settings_repo import SettingsRepository


@dataclass
class WorkflowContext:
    """Everything an operation touches, constructed once and passed in.

    Tests build one over ``MemoryStore``/``MemoryCacheBackend`` with fake
    collaborators; production wiring lives in ``build``.
    """

    store: IStore
    cache: DataCache
    resolver: RoutingResolver
    guard: ConcurrencyGuard
    audit: AuditTrail
    settings: SettingsRepository
    notifier: INotifier
    renderer: IDocumentRenderer
    messages: MessageBuilder
    clock: IClock
    ids: IIdGenerator
    config: WorkflowConfig

    @classmethod
    def build(
        cls,
        store: IStore,
        cache_backend: ICacheBackend | None = None,
        *,
        settings: AppSettings | None = None,
        notifier: INotifier | None = None,
        renderer: IDocumentRenderer | None = None,
        clock: IClock | None = None,
        ids: IIdGenerator | None = None,
    ) -> WorkflowContext:
        settings = settings or AppSettings()
        clock = clock or SystemClock()
        cache = DataCache(
            store,
            cache_backend,
            ttl=settings.cache.ttl_seconds,
            enabled=settings.cache.enabled,
        )
        if notifier is None:
            notifier = _create_notifier(settings)
        return cls(
            store=store,
            cache=cache,
            resolver=RoutingResolver(cache, vp_level=settings.workflow.vp_level),
            guard=ConcurrencyGuard(timeout=settings.workflow.lock_timeout_seconds),
            audit=AuditTrail(notes_max_length=settings.workflow.notes_max_length),
            settings=SettingsRepository(store, settings.workflow),
            notifier=notifier,
            renderer=renderer or HtmlDocumentRenderer(settings.notifier.company_name),
            messages=MessageBuilder(settings.notifier.app_url, settings.notifier.company_name),
            clock=clock,
            ids=ids or RequestIdGenerator(clock),
            config=settings.workflow,
        )


def _create_notifier(settings: AppSettings) -> INotifier:
    cfg = settings.notifier
    if cfg.provider == "ses":
        return SESNotifier(
            sender=cfg.sender,
            sender_name=cfg.sender_name,
            region=cfg.region,
            endpoint_url=cfg.endpoint_url,
        )
    return LogNotifier()
