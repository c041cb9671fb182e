"""
src/pages/overview.py
──────────────────────
System overview page.

Static structure; dynamic KPI data injected via callbacks.
"""

import dash_bootstrap_components as dbc
from dash import html


def layout() -> html.Div:
    return html.Div(
        [
            # ── Page header ───────────────────────────────────────────────────
            html.Div(
                [
                    html.H2("System Overview", className="page-title"),
                    html.P(
                        "Live status of every cable channel monitoring device",
                        className="page-subtitle",
                    ),
                ],
                className="page-header",
            ),
            # ── System KPI banner (dynamic) ───────────────────────────────────
            html.Div(id="overview-kpi-banner", className="mb-3"),
            # ── Open alarms by type (dynamic) ─────────────────────────────────
            html.Div(id="overview-type-counts", className="mb-4"),
            # ── Device status cards (dynamic) ─────────────────────────────────
            html.Div(id="overview-status-cards", className="mb-3"),
            # ── Recent alarms ─────────────────────────────────────────────────
            dbc.Row(
                dbc.Col(
                    html.Div(
                        [
                            html.Div("Recent Alarms", className="chart-title"),
                            html.Div(id="overview-alerts-table"),
                        ],
                        className="chart-card",
                    ),
                    md=12,
                ),
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
