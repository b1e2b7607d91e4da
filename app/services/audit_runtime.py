"""
app/services/audit_runtime.py

Explicit construction of the audit pipeline object graph.

Nothing here is cached at module level: callers (the API app factory, the
worker script, tests) build one runtime and pass it where it is needed.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import requests
from sqlalchemy.orm import Session

from app.config import (
    AuditPipelineSettings,
    AuditQueueSettings,
    OpenPageRankSettings,
    PageSpeedSettings,
    SerpAPISettings,
    get_audit_pipeline_settings,
    get_audit_queue_settings,
    get_open_pagerank_settings,
    get_pagespeed_settings,
    get_serpapi_settings,
)
from app.providers import OpenPageRankProvider, PageSpeedProvider, SerpAPIProvider
from app.queue.dispatcher import AuditJobDispatcher
from app.services.audit_orchestrator_service import AuditOrchestratorService
from app.services.audit_state_machine import AuditStateMachine
from app.services.provider_fanout_service import ProviderFanoutService


@dataclass(frozen=True)
class AuditRuntime:
    dispatcher: AuditJobDispatcher
    state_machine: AuditStateMachine
    orchestrator: AuditOrchestratorService
    queue_settings: AuditQueueSettings


def build_audit_runtime(
    *,
    session_factory: Callable[[], Session] | None = None,
    pipeline_settings: AuditPipelineSettings | None = None,
    queue_settings: AuditQueueSettings | None = None,
    pagespeed_settings: PageSpeedSettings | None = None,
    open_pagerank_settings: OpenPageRankSettings | None = None,
    serpapi_settings: SerpAPISettings | None = None,
    http_session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> AuditRuntime:
    """
    Wire providers, fan-out, state machine, dispatcher and orchestrator.

    Settings default to the environment-driven getters in ``app.config``.
    """

    if session_factory is None:
        from db.session import SessionLocal

        session_factory = SessionLocal

    queue_settings = queue_settings or get_audit_queue_settings()

    pagespeed = PageSpeedProvider(
        settings=pagespeed_settings or get_pagespeed_settings(),
        session=http_session,
    )
    open_pagerank = OpenPageRankProvider(
        settings=open_pagerank_settings or get_open_pagerank_settings(),
        session=http_session,
    )
    serpapi = SerpAPIProvider(
        settings=serpapi_settings or get_serpapi_settings(),
        session=http_session,
    )

    fanout_service = ProviderFanoutService(
        pagespeed=pagespeed,
        open_pagerank=open_pagerank,
        serpapi=serpapi,
        settings=pipeline_settings or get_audit_pipeline_settings(),
        sleep=sleep,
    )
    state_machine = AuditStateMachine(
        session_factory=session_factory,
        fanout_service=fanout_service,
    )
    dispatcher = AuditJobDispatcher(
        handler=state_machine.process,
        max_delivery_attempts=queue_settings.max_delivery_attempts,
        delivery_backoff_seconds=queue_settings.delivery_backoff_seconds,
    )
    orchestrator = AuditOrchestratorService(
        pagespeed=pagespeed,
        open_pagerank=open_pagerank,
        serpapi=serpapi,
        dispatcher=dispatcher if queue_settings.enabled else None,
    )
    return AuditRuntime(
        dispatcher=dispatcher,
        state_machine=state_machine,
        orchestrator=orchestrator,
        queue_settings=queue_settings,
    )
