"""
src/layout/main.py
───────────────────
Root layout: URL router, refresh timer, alarm-action counter, navbar,
page container and footer.
"""
from dash import dcc, html

from config.settings import settings
from src.layout.navbar import create_navbar

PAGE_BG = "#0d1117"
TEXT = "#c9d1d9"


def _footer() -> html.Footer:
    return html.Footer(
        [
            html.Span("Cable Channel Monitor"),
            html.Span(" · "),
            html.Span("Leak · Vibration · Displacement · Cable · Power"),
        ],
        style={
            "textAlign": "center",
            "padding": ".7rem",
            "fontSize": ".72rem",
            "color": "#8b949e",
            "borderTop": "1px solid #30363d",
            "marginTop": "2rem",
        },
    )


def create_layout() -> html.Div:
    return html.Div(
        [
            # Bumped after every acknowledge/resolve so the alarm table re-queries
            dcc.Store(id="store-alert-actions", data=0),
            dcc.Location(id="url", refresh=False),
            dcc.Interval(id="interval-live", interval=settings.UPDATE_INTERVAL_MS, n_intervals=0),
            create_navbar(),
            html.Div(id="page-content", style={"minHeight": "calc(100vh - 60px)"}),
            _footer(),
        ],
        style={"backgroundColor": PAGE_BG, "minHeight": "100vh", "color": TEXT},
    )
