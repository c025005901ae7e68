"""
Composition root.

Builds the object graph (credentials, gateway, refresh bus, local store,
report renderer) from Settings. Nothing in the core reaches for a global;
components receive what they need from here.

Usage:
    from backend.main import create_app
    from backend.settings import Settings

    app = create_app()
    sessions = await app.store.fetch_sessions(client_id)

    # Tests
    app = create_app(settings=Settings(environment="test", _env_file=None))
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import sentry_sdk

from application.events import RefreshBus
from application.local_store import LocalStore
from application.ports import CredentialStore, RemoteGateway, ReportRenderer
from backend.settings import Settings, get_settings
from domain.models import Session
from domain.services.report_paginator import LayoutConfig, build_report
from infrastructure import HttpRemoteGateway, InMemoryCredentialStore, TextReportRenderer

logger = logging.getLogger(__name__)


@dataclass
class App:
    """Wired application components."""

    settings: Settings
    credentials: CredentialStore
    gateway: RemoteGateway
    bus: RefreshBus
    store: LocalStore
    renderer: ReportRenderer
    layout: LayoutConfig

    def render_report(self, client_name: str, sessions: Sequence[Session]) -> bytes:
        """Order, paginate and render a client's sessions."""
        report = build_report(client_name, sessions, self.layout)
        logger.info(
            f"Rendered report for {client_name}: {len(report.sessions)} sessions, "
            f"{report.page_count} pages"
        )
        return self.renderer.render(report)

    def logout(self) -> None:
        self.credentials.set_token(None)
        self.store.clear()


def create_app(
    settings: Optional[Settings] = None,
    *,
    gateway: Optional[RemoteGateway] = None,
    credentials: Optional[CredentialStore] = None,
) -> App:
    """
    Create and wire an App instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.
        gateway: Optional gateway override (tests pass a fake)
        credentials: Optional credential store override

    Returns:
        Wired App.
    """
    if settings is None:
        settings = get_settings()

    _init_sentry(settings)

    if credentials is None:
        credentials = InMemoryCredentialStore(settings.auth_token)
    if gateway is None:
        gateway = HttpRemoteGateway(
            settings.api_base_url,
            credentials,
            timeout=settings.request_timeout_seconds,
        )

    bus = RefreshBus()
    store = LocalStore(gateway=gateway, bus=bus)

    return App(
        settings=settings,
        credentials=credentials,
        gateway=gateway,
        bus=bus,
        store=store,
        renderer=TextReportRenderer(),
        layout=settings.layout_config(),
    )


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized")
