"""
src/callbacks/alerts.py
────────────────────────
Alarm management page callbacks.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
import pandas as pd
from dash import ALL, Input, Output, State, ctx, html

from config.alarms import MAX_ALERTS_DISPLAY, AlertStatus, label
from src.callbacks.devices import device_options
from src.data.errors import MonitorError
from src.layout.components.alert_badge import alert_status_badge, level_badge
from src.services.monitoring import MonitoringService

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"

_LEVEL_ORDER = {"critical": 2, "warning": 1}


def _action_button(text: str, btn_type: str, alert_id: int, color: str, disabled: bool) -> html.Button:
    return html.Button(
        text,
        id={"type": btn_type, "index": alert_id},
        n_clicks=0,
        disabled=disabled,
        style={
            "fontSize": ".68rem",
            "fontWeight": "600",
            "color": color,
            "background": "transparent",
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "2px 8px",
            "marginRight": "4px",
            "cursor": "default" if disabled else "pointer",
            "opacity": "0.4" if disabled else "1",
        },
    )


def _fmt_value(value) -> str:
    try:
        return f"{float(value):g}"
    except (TypeError, ValueError):
        return str(value)


def _build_table(df: pd.DataFrame) -> html.Div:
    if df.empty:
        return html.Div(
            "No alarms for the selected filters.",
            style={"color": MUTED, "padding": "20px", "textAlign": "center"},
        )

    rows = []
    for _, row in df.iterrows():
        alert_id = int(row["id"])
        status = row["status"]
        threshold = "" if pd.isna(row["threshold"]) else _fmt_value(row["threshold"])
        rows.append(
            html.Tr(
                [
                    html.Td(row["created_at"].strftime("%Y-%m-%d %H:%M"), style={"color": MUTED, "fontSize": ".78rem"}),
                    html.Td(html.Span(row["device_code"], style={"color": "#58a6ff", "fontSize": ".82rem", "fontWeight": "600"})),
                    html.Td(label(row["alarm_type"]), style={"fontSize": ".78rem"}),
                    html.Td(level_badge(row["alarm_level"])),
                    html.Td(_fmt_value(row["observed_value"]), style={"fontSize": ".78rem"}),
                    html.Td(threshold, style={"fontSize": ".78rem", "color": MUTED}),
                    html.Td(
                        row["description"],
                        style={"fontSize": ".72rem", "color": MUTED, "maxWidth": "280px", "overflow": "hidden", "textOverflow": "ellipsis"},
                    ),
                    html.Td(alert_status_badge(status)),
                    html.Td(
                        [
                            _action_button("Acknowledge", "ack-btn", alert_id, "#58a6ff",
                                           disabled=status != AlertStatus.UNHANDLED.value),
                            _action_button("Resolve", "resolve-btn", alert_id, "#2ea44f",
                                           disabled=status == AlertStatus.RESOLVED.value),
                        ]
                    ),
                ],
                style={"borderBottom": f"1px solid {BORDER}"},
            )
        )

    return html.Div(
        html.Table(
            [
                html.Thead(
                    html.Tr(
                        [html.Th(h) for h in ["Time", "Device", "Type", "Level", "Value", "Threshold", "Description", "Status", ""]],
                        style={"color": MUTED, "fontSize": ".68rem", "textTransform": "uppercase"},
                    )
                ),
                html.Tbody(rows),
            ],
            style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".82rem"},
        ),
        style={"overflowX": "auto"},
    )


def _summary_badges(df: pd.DataFrame) -> dbc.Row:
    counts = df.groupby("status").size() if not df.empty else pd.Series(dtype=int)
    colors = {"unhandled": "#da3633", "acknowledged": "#e8a020", "resolved": "#2ea44f"}
    return dbc.Row(
        [
            dbc.Col(
                html.Div(
                    [
                        html.Div(str(int(counts.get(status.value, 0))), style={"fontSize": "1.4rem", "fontWeight": "700", "color": colors[status.value]}),
                        html.Div(label(status), style={"fontSize": ".65rem", "color": MUTED, "textTransform": "uppercase"}),
                    ],
                    style={"backgroundColor": CARD_BG, "border": f"1px solid {BORDER}", "borderRadius": "8px", "padding": "10px 16px"},
                ),
                xs=4, md=2,
            )
            for status in AlertStatus
        ],
        className="g-2",
    )


def register(app, service: MonitoringService) -> None:

    @app.callback(
        Output("alerts-filter-device", "options"),
        Input("url", "pathname"),
    )
    def load_device_filter(pathname: str):
        return device_options(service, include_all=True)

    @app.callback(
        [
            Output("alerts-table", "children"),
            Output("alerts-summary-badges", "children"),
        ],
        [
            Input("interval-live", "n_intervals"),
            Input("alerts-filter-status", "value"),
            Input("alerts-filter-type", "value"),
            Input("alerts-filter-device", "value"),
            Input("store-alert-actions", "data"),
        ],
    )
    def update_alerts_table(
        n_intervals: int,
        status_filter: str,
        type_filter: str,
        device_filter: str,
        actions: int,
    ):
        df = service.alerts.list_alerts(
            status=None if status_filter == "all" else status_filter,
            alarm_type=None if type_filter == "all" else type_filter,
            device_code=None if device_filter == "all" else device_filter,
            limit=500,
        )

        if not df.empty:
            # Open alarms first, then by level, then newest
            df["_open"] = df["status"].isin(["unhandled", "acknowledged"])
            df["_level"] = df["alarm_level"].map(_LEVEL_ORDER).fillna(0)
            df = df.sort_values(["_open", "_level", "created_at"], ascending=[False, False, False]).head(MAX_ALERTS_DISPLAY)

        badges = _summary_badges(service.alerts.list_alerts(limit=10_000))
        return _build_table(df), badges

    @app.callback(
        [
            Output("store-alert-actions", "data"),
            Output("alerts-action-feedback", "children"),
        ],
        [
            Input({"type": "ack-btn", "index": ALL}, "n_clicks"),
            Input({"type": "resolve-btn", "index": ALL}, "n_clicks"),
        ],
        State("store-alert-actions", "data"),
        prevent_initial_call=True,
    )
    def handle_alert_action(ack_clicks: list, resolve_clicks: list, actions: int):
        # Re-rendering the table fires this callback with n_clicks == 0
        if not ctx.triggered_id or not ctx.triggered[0]["value"]:
            return actions or 0, None

        alert_id = ctx.triggered_id["index"]
        try:
            if ctx.triggered_id["type"] == "ack-btn":
                service.acknowledge(alert_id)
                message = f"Alarm {alert_id} acknowledged."
            else:
                service.resolve(alert_id)
                message = f"Alarm {alert_id} resolved."
        except MonitorError as exc:
            return actions or 0, dbc.Alert(str(exc), color="danger", duration=5000, className="py-2")

        return (actions or 0) + 1, dbc.Alert(message, color="success", duration=3000, className="py-2")
