"""
Application context.

Holds the pieces of dashboard state that would otherwise be ambient: the
loaded payloads, the chart registry, the session machine and the theme. The
UI keeps exactly one AppContext per browser session and calls ``init`` once,
``render_section`` on navigation, ``toggle_theme`` on the toggle button and
``teardown`` on logout.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Set

import httpx
import numpy as np
import pandas as pd

from .auth import AuthState, Session, SessionAuthMachine
from .charts import ChartBackend, ChartRegistry, PlotlyBackend, charts_for, spec_for
from .config import Settings, get_settings
from .connector import SectionLoader, SectionPayload
from .connector.models import BotRecord, ExplorerRow
from .sections import ALL_SECTIONS, SectionId
from .state_store import ClientStateStore
from .theme import ThemeManager, ThemeToken

logger = logging.getLogger("sast.context")


class AppContext:
    def __init__(
        self,
        loader: SectionLoader,
        auth: SessionAuthMachine,
        theme: ThemeManager,
        registry: ChartRegistry,
    ):
        self.loader = loader
        self.auth = auth
        self.theme = theme
        self.registry = registry
        self.payloads: Dict[SectionId, SectionPayload] = {}
        self.rendered: Set[SectionId] = set()
        self.dashboard_visible = False

        self.auth.subscribe(self._on_auth_change)
        self.theme.subscribe(self._on_theme_change)

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        store: Optional[ClientStateStore] = None,
        backend: Optional[ChartBackend] = None,
        data_transport: Optional[httpx.AsyncBaseTransport] = None,
        auth_transport: Optional[httpx.BaseTransport] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> "AppContext":
        """Wire every component from settings."""
        settings = settings or get_settings()
        store = store if store is not None else ClientStateStore(settings.state_file)
        loader = SectionLoader(
            settings.api_base_url,
            timeout=settings.request_timeout,
            transport=data_transport,
            rng=rng,
        )
        auth = SessionAuthMachine(
            settings.api_base_url,
            store,
            transport=auth_transport,
            timeout=settings.request_timeout,
            min_password_length=settings.min_password_length,
        )
        return cls(loader, auth, ThemeManager(store), ChartRegistry(backend or PlotlyBackend()))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def init(self) -> AuthState:
        """Resolve the held session; an authenticated session triggers the first load."""
        self.auth.check()
        return self.auth.state

    def reload(self, sections: Iterable = ALL_SECTIONS) -> Dict[SectionId, SectionPayload]:
        """
        Replace the payloads for ``sections`` wholesale.

        Charts already built for a reloaded section are rebuilt from the new
        payload; charts not yet built pick it up on first render.
        """
        fresh = self.loader.load_all_sync(sections)
        self.payloads.update(fresh)
        for section in fresh:
            if section in self.rendered:
                self._rebuild_section(section)
        return fresh

    def teardown(self) -> None:
        self.registry.teardown()
        self.payloads.clear()
        self.rendered.clear()
        logger.info("Application context torn down")

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    @property
    def tokens(self) -> ThemeToken:
        return self.theme.tokens

    def payload(self, section) -> SectionPayload:
        section = SectionId.parse(section)
        if section not in self.payloads:
            self.reload({section})
        return self.payloads[section]

    def render_section(self, section) -> Dict[str, Any]:
        """
        Mount and ensure every chart of ``section``.

        Returns chart id -> live instance. Charts that already exist are
        returned as they are.
        """
        section = SectionId.parse(section)
        payload = self.payload(section)
        specs = charts_for(section)

        self.registry.backend.mount(*(c.id for c in specs))
        self.rendered.add(section)

        tokens = self.tokens
        charts = {}
        for chart in specs:
            instance = self.registry.ensure(chart.id, chart.build(payload, tokens))
            if instance is not None:
                charts[chart.id] = instance
        return charts

    def _rebuild_section(self, section: SectionId) -> None:
        tokens = self.tokens
        payload = self.payloads[section]
        for chart in charts_for(section):
            if self.registry.get(chart.id) is not None:
                self.registry.rebuild(chart.id, chart.build(payload, tokens))

    def toggle_theme(self) -> ThemeToken:
        return self.theme.toggle_theme()

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def _on_theme_change(self, tokens: ThemeToken) -> None:
        live = self.registry.live_ids()
        logger.debug(f"Rebuilding {len(live)} charts for theme {tokens.name}")
        for chart_id in live:
            chart = spec_for(chart_id)
            payload = self.payloads.get(chart.section)
            if payload is not None:
                self.registry.rebuild(chart_id, chart.build(payload, tokens))

    def _on_auth_change(self, state: AuthState, session: Session) -> None:
        self.dashboard_visible = state == AuthState.AUTHENTICATED
        if self.dashboard_visible:
            self.reload()
        else:
            self.teardown()


def filter_explorer(
    rows: Iterable[ExplorerRow],
    protocol: Optional[str] = None,
    device: Optional[str] = None,
    region: Optional[str] = None,
) -> pd.DataFrame:
    """Conjunctive filter over explorer rows; an empty or None criterion matches everything."""
    df = pd.DataFrame([r.model_dump() for r in rows], columns=list(ExplorerRow.model_fields))
    for column, value in (("protocol", protocol), ("device", device), ("region", region)):
        if value:
            df = df[df[column] == value]
    return df.reset_index(drop=True)


BOT_COLUMNS = ["name", "kind", "requests"]


def bots_frame(bots: Iterable[BotRecord]) -> pd.DataFrame:
    """Crawler table with an AI/BOT ``kind`` column; an empty payload keeps the columns."""
    df = pd.DataFrame([b.model_dump() for b in bots], columns=list(BotRecord.model_fields))
    df["kind"] = df["ai"].map({True: "AI", False: "BOT"})
    return df[BOT_COLUMNS]
