"""
src/pages/devices.py
─────────────────────
Single-device detail page: latest reading, history chart, alarm records
and operator test actions.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

from config.alarms import AlarmType, label

MUTED = "#8b949e"

_VARIABLE_OPTIONS = [
    {"label": "Vibration (Hz)", "value": "vibration_level"},
    {"label": "Displacement (mm)", "value": "displacement"},
    {"label": "Humidity index (%)", "value": "humidity_index"},
    {"label": "Signal strength (%)", "value": "signal_strength"},
    {"label": "Current strength (%)", "value": "current_strength"},
]

_LIMIT_OPTIONS = [
    {"label": "Last 24", "value": 24},
    {"label": "Last 96", "value": 96},
    {"label": "Last 500", "value": 500},
]

_LABEL_STYLE = {"fontSize": ".72rem", "color": MUTED, "textTransform": "uppercase"}


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Device Detail", className="page-title"),
                    html.P("Latest reading, history and alarm records", className="page-subtitle"),
                ],
                className="page-header",
            ),

            # ── Controls ───────────────────────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        [
                            html.Label("Device", style=_LABEL_STYLE),
                            dcc.Dropdown(
                                id="device-selector",
                                options=[],
                                value=None,
                                clearable=False,
                                className="dark-dropdown",
                            ),
                        ],
                        md=3,
                    ),
                    dbc.Col(
                        [
                            html.Label("Variable", style=_LABEL_STYLE),
                            dcc.Dropdown(
                                id="device-variable",
                                options=_VARIABLE_OPTIONS,
                                value="vibration_level",
                                clearable=False,
                                className="dark-dropdown",
                            ),
                        ],
                        md=3,
                    ),
                    dbc.Col(
                        [
                            html.Label("Window", style=_LABEL_STYLE),
                            dcc.Dropdown(
                                id="device-limit",
                                options=_LIMIT_OPTIONS,
                                value=96,
                                clearable=False,
                                className="dark-dropdown",
                            ),
                        ],
                        md=2,
                    ),
                ],
                className="g-3 mb-3",
            ),

            # ── Latest reading + actions ───────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(html.Div(id="device-latest", className="chart-card"), md=8),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Actions", className="chart-title"),
                                dbc.Button(
                                    "Inject simulated reading",
                                    id="device-inject-btn",
                                    n_clicks=0,
                                    color="primary",
                                    size="sm",
                                    className="mb-2 w-100",
                                ),
                                dcc.Dropdown(
                                    id="device-test-type",
                                    options=[{"label": label(t), "value": t.value} for t in AlarmType],
                                    value=AlarmType.LEAK.value,
                                    clearable=False,
                                    className="dark-dropdown mb-2",
                                ),
                                dbc.Button(
                                    "Trigger test alarm",
                                    id="device-test-btn",
                                    n_clicks=0,
                                    color="warning",
                                    size="sm",
                                    className="w-100",
                                ),
                                html.Div(id="device-action-feedback", className="mt-2"),
                            ],
                            className="chart-card",
                        ),
                        md=4,
                    ),
                ],
                className="g-3 mb-3",
            ),

            # ── History chart ──────────────────────────────────────────────────
            html.Div(
                [
                    html.Div(id="device-chart-title", className="chart-title"),
                    dcc.Graph(id="device-history-chart", config={"displayModeBar": False}),
                ],
                className="chart-card mb-3",
            ),

            # ── Alarm records ──────────────────────────────────────────────────
            html.Div(
                [
                    html.Div("Alarm Records", className="chart-title"),
                    html.Div(id="device-alarms-table"),
                ],
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
