"""
src/pages/alerts.py
────────────────────
Alarm management page with filters, acknowledgement and resolution.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

from config.alarms import AlarmType, AlertStatus, label

MUTED = "#8b949e"

_STATUS_OPTIONS = [
    {"label": "Open", "value": "open"},
    {"label": "All", "value": "all"},
] + [{"label": label(s), "value": s.value} for s in AlertStatus]

_TYPE_OPTIONS = [{"label": "All", "value": "all"}] + [
    {"label": label(t), "value": t.value} for t in AlarmType
]

# Filled from the device registry when the page loads
_DEVICE_OPTIONS = [{"label": "All", "value": "all"}]

_LABEL_STYLE = {"fontSize": ".72rem", "color": MUTED, "textTransform": "uppercase"}


def _filter(title: str, component_id: str, options: list[dict], value: str) -> dbc.Col:
    return dbc.Col(
        [
            html.Label(title, style=_LABEL_STYLE),
            dcc.Dropdown(
                id=component_id,
                options=options,
                value=value,
                clearable=False,
                style={"fontSize": ".85rem"},
                className="dark-dropdown",
            ),
        ],
        md=3,
    )


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Alarm Management", className="page-title"),
                    html.P("Alarm records and their handling state", className="page-subtitle"),
                ],
                className="page-header",
            ),
            # ── Summary badges ─────────────────────────────────────────────────
            html.Div(id="alerts-summary-badges", className="mb-3"),
            # ── Filter row ─────────────────────────────────────────────────────
            dbc.Row(
                [
                    _filter("Status", "alerts-filter-status", _STATUS_OPTIONS, "open"),
                    _filter("Type", "alerts-filter-type", _TYPE_OPTIONS, "all"),
                    _filter("Device", "alerts-filter-device", _DEVICE_OPTIONS, "all"),
                ],
                className="g-3 mb-3",
            ),
            html.Div(id="alerts-action-feedback", className="mb-2"),
            # ── Alert table ────────────────────────────────────────────────────
            html.Div(
                html.Div(id="alerts-table"),
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
