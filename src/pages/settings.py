"""
src/pages/settings.py
──────────────────────
Threshold configuration page.
"""
import dash_bootstrap_components as dbc
from dash import dcc, html

from config.devices import DEFAULT_THRESHOLDS, THRESHOLD_KEYS, THRESHOLD_UNITS

MUTED = "#8b949e"


def _threshold_row(key: str) -> dbc.Row:
    return dbc.Row(
        [
            dbc.Col(
                [
                    html.Div(key, style={"fontWeight": "600", "fontSize": ".85rem"}),
                    html.Div(DEFAULT_THRESHOLDS[key]["description"], style={"fontSize": ".7rem", "color": MUTED}),
                ],
                md=5,
            ),
            dbc.Col(
                dbc.InputGroup(
                    [
                        dcc.Input(
                            id={"type": "threshold-input", "key": key},
                            type="number",
                            debounce=True,
                            className="form-control",
                        ),
                        dbc.InputGroupText(THRESHOLD_UNITS[key]),
                    ],
                    size="sm",
                ),
                md=3,
            ),
        ],
        className="g-2 mb-2 align-items-center",
    )


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Settings", className="page-title"),
                    html.P(
                        "Alarm thresholds · applied to every reading received after saving",
                        className="page-subtitle",
                    ),
                ],
                className="page-header",
            ),
            html.Div(
                [_threshold_row(key) for key in THRESHOLD_KEYS]
                + [
                    dbc.Button("Save", id="settings-save-btn", n_clicks=0, color="primary", size="sm"),
                    html.Div(id="settings-feedback", className="mt-3"),
                ],
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
