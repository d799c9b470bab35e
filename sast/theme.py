"""
SAST Theme Lifecycle

Two-valued display theme (dark/light), persisted across sessions, and the
pure mapping from theme name to the style tokens baked into every chart.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List

from .state_store import THEME_KEY, ClientStateStore

logger = logging.getLogger("sast.theme")

DARK = "dark"
LIGHT = "light"
THEME_NAMES = (DARK, LIGHT)
DEFAULT_THEME = DARK

# =============================================================================
# Tokens
# =============================================================================

@dataclass(frozen=True)
class ThemeToken:
    """Resolved chart style values for a theme."""
    name: str
    grid_color: str
    text_color: str
    tooltip_bg: str
    tooltip_border: str


DARK_TOKENS = ThemeToken(
    name=DARK,
    grid_color="rgba(30,42,63,.7)",
    text_color="#7d8fa3",
    tooltip_bg="#111827",
    tooltip_border="#1e2a3f",
)

LIGHT_TOKENS = ThemeToken(
    name=LIGHT,
    grid_color="rgba(200,210,222,.4)",
    text_color="#5a6577",
    tooltip_bg="#ffffff",
    tooltip_border="#dde3ec",
)

_TOKENS = {DARK: DARK_TOKENS, LIGHT: LIGHT_TOKENS}

# Tooltip text colours do not vary with the theme
TOOLTIP_TITLE_COLOR = "#f0f4ff"
TOOLTIP_BODY_COLOR = "#7d8fa3"


def tokens_for(name: str) -> ThemeToken:
    """Pure mapping from theme name to its tokens. Unknown names fall back to dark."""
    return _TOKENS.get(name, DARK_TOKENS)


def get_plotly_layout(tokens: ThemeToken) -> Dict:
    """Plotly layout defaults derived from the theme tokens."""
    axis = {
        "gridcolor": tokens.grid_color,
        "linecolor": tokens.grid_color,
        "tickfont": {"color": tokens.text_color, "size": 10},
        "zeroline": False,
    }
    return {
        "paper_bgcolor": "rgba(0,0,0,0)",
        "plot_bgcolor": "rgba(0,0,0,0)",
        "font": {"family": "Inter, sans-serif", "color": tokens.text_color, "size": 11},
        "hoverlabel": {
            "bgcolor": tokens.tooltip_bg,
            "bordercolor": tokens.tooltip_border,
            "font": {"color": TOOLTIP_TITLE_COLOR if tokens.name == DARK else "#1a1a2e", "size": 11},
        },
        "hovermode": "x unified",
        "showlegend": False,
        "margin": {"l": 40, "r": 16, "t": 24, "b": 32},
        "xaxis": dict(axis),
        "yaxis": dict(axis),
    }


_PAGE_COLORS = {
    DARK: {"bg": "#0a0e17", "card": "#111827", "text": "#f0f4ff"},
    LIGHT: {"bg": "#f4f6fa", "card": "#ffffff", "text": "#1a1a2e"},
}


def generate_css(tokens: ThemeToken) -> str:
    """Page-level CSS for the Streamlit front-end."""
    page = _PAGE_COLORS.get(tokens.name, _PAGE_COLORS[DARK])
    return f"""
<style>
    :root {{
        --bg: {page['bg']};
        --card: {page['card']};
        --text: {page['text']};
        --muted: {tokens.text_color};
        --border: {tokens.tooltip_border};
        --accent: #00e5a0;
    }}

    .stApp {{
        background: var(--bg);
        color: var(--text);
        font-family: 'Inter', sans-serif;
    }}

    [data-testid="stSidebar"] {{
        background: var(--card);
        border-right: 1px solid var(--border);
    }}

    [data-testid="stMetric"] {{
        background: var(--card);
        border: 1px solid var(--border);
        border-radius: 10px;
        padding: 0.75rem 1rem;
    }}

    [data-testid="stMetricLabel"] {{ color: var(--muted); }}

    #MainMenu {{visibility: hidden;}}
    footer {{visibility: hidden;}}
</style>
"""


# =============================================================================
# Lifecycle
# =============================================================================

ThemeListener = Callable[[ThemeToken], None]


class ThemeManager:
    """
    Reads and persists the theme name and notifies listeners on toggle.

    Tokens are baked into charts at construction time, so listeners are
    expected to rebuild whatever depends on them.
    """

    def __init__(self, store: ClientStateStore):
        self._store = store
        self._listeners: List[ThemeListener] = []

    def get_theme(self) -> str:
        name = self._store.get(THEME_KEY, DEFAULT_THEME)
        return name if name in THEME_NAMES else DEFAULT_THEME

    @property
    def tokens(self) -> ThemeToken:
        return tokens_for(self.get_theme())

    @property
    def is_dark(self) -> bool:
        return self.get_theme() == DARK

    def subscribe(self, listener: ThemeListener) -> None:
        self._listeners.append(listener)

    def toggle_theme(self) -> ThemeToken:
        name = LIGHT if self.get_theme() == DARK else DARK
        self._store.set(THEME_KEY, name)
        tokens = tokens_for(name)
        logger.info(f"Theme switched to {name}")
        for listener in list(self._listeners):
            listener(tokens)
        return tokens
