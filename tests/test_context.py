import httpx
import numpy as np
import pytest

from sast.auth import AuthState
from sast.charts import charts_for
from sast.config import Settings
from sast.connector import BotsPayload
from sast.context import AppContext, bots_frame, filter_explorer
from sast.sections import ALL_SECTIONS, SectionId
from sast.state_store import TOKEN_KEY
from sast.theme import LIGHT

from .conftest import API_ROOT, CallCounter, RecordingBackend, unreachable


def _make_ctx(settings, store, backend):
    return AppContext.create(
        settings,
        store=store,
        backend=backend,
        data_transport=httpx.MockTransport(unreachable),
        auth_transport=httpx.MockTransport(unreachable),
        rng=np.random.default_rng(5),
    )


@pytest.fixture
def ctx(settings, store, backend):
    return _make_ctx(settings, store, backend)


def _ids(section):
    return [c.id for c in charts_for(section)]


class TestLifecycle:
    def test_init_without_token_keeps_dashboard_hidden(self, ctx):
        assert ctx.init() == AuthState.UNAUTHENTICATED
        assert not ctx.dashboard_visible
        assert ctx.payloads == {}

    def test_login_loads_every_section(self, ctx):
        ctx.auth.login("demo@x.io", "secret")

        assert ctx.dashboard_visible
        assert set(ctx.payloads) == set(ALL_SECTIONS)

    def test_init_with_held_token_loads(self, settings, store, backend):
        store.set(TOKEN_KEY, "demo")
        ctx = _make_ctx(settings, store, backend)

        assert ctx.init() == AuthState.AUTHENTICATED
        assert set(ctx.payloads) == set(ALL_SECTIONS)

    def test_logout_tears_down(self, ctx, backend):
        ctx.auth.login("demo@x.io", "secret")
        ctx.render_section("overview")

        ctx.auth.logout()

        assert not ctx.dashboard_visible
        assert ctx.payloads == {}
        assert ctx.registry.live_ids() == []
        assert sorted(cid for cid, _ in backend.destroyed) == sorted(_ids(SectionId.OVERVIEW))


class TestRendering:
    def test_render_builds_each_chart_once(self, ctx, backend):
        ctx.auth.login("demo@x.io", "secret")

        first = ctx.render_section(SectionId.TRAFFIC)
        second = ctx.render_section("traffic")

        assert set(first) == set(_ids(SectionId.TRAFFIC))
        assert all(first[cid] is second[cid] for cid in first)
        for cid in first:
            assert backend.constructs_for(cid) == 1

    def test_sections_without_charts(self, ctx):
        ctx.auth.login("demo@x.io", "secret")
        assert ctx.render_section("bots") == {}

    def test_render_loads_missing_payload(self, ctx):
        ctx.render_section("security")
        assert SectionId.SECURITY in ctx.payloads

    def test_reload_replaces_payload_and_rebuilds_rendered_charts(self, ctx, backend):
        ctx.auth.login("demo@x.io", "secret")
        ctx.render_section("overview")
        before = ctx.payloads[SectionId.OVERVIEW]

        ctx.reload({"overview"})

        assert ctx.payloads[SectionId.OVERVIEW] is not before
        assert backend.constructs_for("overview.rps") == 2
        assert backend.destroys_for("overview.rps") == 1


class TestThemeToggle:
    def test_toggle_rebuilds_only_rendered_charts(self, ctx, backend):
        ctx.auth.login("demo@x.io", "secret")
        ctx.render_section("overview")

        ctx.toggle_theme()

        for cid in _ids(SectionId.OVERVIEW):
            assert backend.destroys_for(cid) == 1
            assert backend.constructs_for(cid) == 2
            assert ctx.registry.handle(cid).config.tokens.name == LIGHT
        never_rendered = [cid for s in ALL_SECTIONS if s != SectionId.OVERVIEW for cid in _ids(s)]
        for cid in never_rendered:
            assert backend.constructs_for(cid) == 0
            assert backend.destroys_for(cid) == 0

    def test_toggle_with_nothing_rendered(self, ctx, backend):
        ctx.toggle_theme()
        assert backend.constructed == []

    def test_later_render_uses_new_theme(self, ctx, backend):
        ctx.auth.login("demo@x.io", "secret")
        ctx.toggle_theme()
        ctx.render_section("connectivity")
        assert ctx.registry.handle("connectivity.speed").config.tokens.name == LIGHT


class TestExplorerFilter:
    def test_filters_are_conjunctive(self, ctx):
        rows = ctx.payload("tools").explorer
        df = filter_explorer(rows, protocol="HTTPS", device="Mobile")

        assert (df["protocol"] == "HTTPS").all()
        assert (df["device"] == "Mobile").all()
        expected = [r for r in rows if r.protocol == "HTTPS" and r.device == "Mobile"]
        assert len(df) == len(expected)

    def test_no_criteria_returns_everything(self, ctx):
        rows = ctx.payload("tools").explorer
        assert len(filter_explorer(rows)) == len(rows) == 50

    def test_no_match_keeps_columns(self, ctx):
        df = filter_explorer(ctx.payload("tools").explorer, region="Antarctica")
        assert df.empty
        assert "latency" in df.columns


def test_unmounted_backend_builds_nothing(settings, store):
    backend = RecordingBackend()
    backend.mount = lambda *ids: None
    ctx = AppContext.create(
        settings, store=store, backend=backend,
        data_transport=httpx.MockTransport(unreachable),
        auth_transport=httpx.MockTransport(unreachable),
    )
    assert ctx.render_section("overview") == {}
    assert backend.constructed == []


class TestBrowserSessions:
    @staticmethod
    def _server(request: httpx.Request) -> httpx.Response:
        if request.url.params["action"] == "login":
            return httpx.Response(
                200, json={"success": True, "token": "b" * 64, "user": {"id": 1, "username": "ana", "email": "ana@x.io"}}
            )
        return httpx.Response(200, json={"authenticated": True, "user": {"id": 1, "username": "ana", "email": "ana@x.io"}})

    def _browser(self, settings, counter):
        return AppContext.create(
            settings,
            backend=RecordingBackend(),
            data_transport=httpx.MockTransport(unreachable),
            auth_transport=httpx.MockTransport(counter),
        )

    def test_second_browser_does_not_inherit_a_login(self, tmp_path):
        settings = Settings(api_base_url=API_ROOT, database_path=tmp_path / "auth.sqlite")
        counter = CallCounter(self._server)

        first = self._browser(settings, counter)
        first.init()
        assert first.auth.login("ana@x.io", "secret").ok

        second = self._browser(settings, counter)
        assert second.init() == AuthState.UNAUTHENTICATED
        assert second.auth.token is None
        assert not second.dashboard_visible
        assert counter.calls == 1
        assert list(tmp_path.iterdir()) == []

    def test_theme_is_per_browser(self, tmp_path):
        settings = Settings(api_base_url=API_ROOT, database_path=tmp_path / "auth.sqlite")
        first = self._browser(settings, CallCounter(unreachable))
        second = self._browser(settings, CallCounter(unreachable))

        first.toggle_theme()

        assert first.theme.get_theme() == LIGHT
        assert second.theme.get_theme() != LIGHT


class TestBotsFrame:
    def test_empty_payload_keeps_columns(self):
        payload = BotsPayload.model_validate({"bots": [], "robots_txt_agents": []})

        df = bots_frame(payload.bots)

        assert df.empty
        assert list(df.columns) == ["name", "kind", "requests"]

    def test_kind_labels(self, ctx):
        df = bots_frame(ctx.payload("bots").bots)

        assert len(df) == 10
        assert set(df["kind"]) <= {"AI", "BOT"}
        assert "ai" not in df.columns
