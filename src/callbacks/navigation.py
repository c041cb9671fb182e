"""
src/callbacks/navigation.py — Page routing and overview page callbacks.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import Input, Output, State, html

from config.alarms import STATUS_COLORS, AlarmType, DeviceStatus, label
from src.layout.components.alert_badge import device_status_badge, level_badge
from src.layout.components.kpi_card import kpi_card, reading_kpi
from src.services.monitoring import MonitoringService

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"

_TYPE_COUNT_FIELDS = [
    (AlarmType.LEAK, "leak_alerts"),
    (AlarmType.VIBRATION, "vibration_alerts"),
    (AlarmType.DISPLACEMENT, "displacement_alerts"),
    (AlarmType.CABLE_MISSING, "cable_alerts"),
    (AlarmType.POWER_LOSS, "power_alerts"),
]


def _status_card(entry: dict) -> dbc.Col:
    device = entry["device"]
    latest = entry["latest"]
    open_alerts = entry["open_alerts"]
    color = STATUS_COLORS.get(device.status, MUTED)

    if latest is None:
        body = html.Div("No readings yet.", style={"fontSize": ".75rem", "color": MUTED})
    else:
        body = html.Div(
            [
                reading_kpi("Leak", "yes" if latest["leak_detected"] else "no", bool(latest["leak_detected"])),
                reading_kpi("Vibration", f"{latest['vibration_level']:.1f} Hz"),
                reading_kpi("Displacement", f"{latest['displacement']:.1f} mm"),
                reading_kpi("Cable", "present" if latest["cable_present"] else "missing", not latest["cable_present"]),
                reading_kpi("Power", "on" if latest["power_status"] else "off", not latest["power_status"]),
                reading_kpi("Open alarms", str(open_alerts), open_alerts > 0),
            ],
            style={"display": "grid", "gridTemplateColumns": "1fr 1fr 1fr", "gap": "8px"},
        )

    return dbc.Col(
        html.Div(
            [
                html.Div(
                    [
                        html.Span(device.device_code, style={"fontWeight": "700", "color": "#58a6ff", "fontSize": ".95rem"}),
                        html.Span(device.name, style={"fontSize": ".72rem", "color": MUTED, "marginLeft": "8px"}),
                        html.Span(device_status_badge(device.status), style={"float": "right"}),
                    ],
                    style={"marginBottom": "4px"},
                ),
                html.Div(device.location, style={"fontSize": ".68rem", "color": MUTED, "marginBottom": "10px"}),
                body,
            ],
            style={
                "backgroundColor": CARD_BG,
                "border": f"1px solid {color if device.status != DeviceStatus.NORMAL else BORDER}",
                "borderRadius": "8px",
                "padding": "14px",
            },
        ),
        md=6,
        xl=3,
    )


def register(app, service: MonitoringService) -> None:
    """Register navigation + overview page callbacks."""

    # ── Page routing ──────────────────────────────────────────────────────────
    from src.pages import alerts, devices, overview, settings

    @app.callback(
        Output("page-content", "children"),
        Input("url", "pathname"),
    )
    def display_page(pathname: str):
        routes = {
            "/": overview.layout,
            "/devices": devices.layout,
            "/alerts": alerts.layout,
            "/settings": settings.layout,
        }
        return routes.get(pathname, overview.layout)()

    # ── Navbar collapse ───────────────────────────────────────────────────────
    @app.callback(
        Output("navbar-collapse", "is_open"),
        Input("navbar-toggler", "n_clicks"),
        State("navbar-collapse", "is_open"),
        prevent_initial_call=True,
    )
    def toggle_navbar(n_clicks: int, is_open: bool) -> bool:
        return not is_open

    # ── Overview ──────────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("overview-kpi-banner", "children"),
            Output("overview-type-counts", "children"),
            Output("overview-status-cards", "children"),
            Output("overview-alerts-table", "children"),
        ],
        Input("interval-live", "n_intervals"),
    )
    def update_overview(n_intervals: int):
        ov = service.overview()
        sys_color = STATUS_COLORS.get(ov.system_status, MUTED)
        last_check = ov.last_check_time.strftime("%Y-%m-%d %H:%M") if ov.last_check_time else "no data"

        kpi_banner = dbc.Row(
            [
                dbc.Col(kpi_card("System Status", label(ov.system_status), sys_color,
                                 sub_label=f"Last check {last_check}", border_color=sys_color), xs=6, md=3),
                dbc.Col(kpi_card("Devices", str(ov.total_devices), "#58a6ff"), xs=6, md=3),
                dbc.Col(kpi_card("Abnormal Devices", str(ov.abnormal_devices),
                                 "#da3633" if ov.abnormal_devices else "#2ea44f"), xs=6, md=3),
                dbc.Col(kpi_card("Open Alarms", str(ov.open_alerts),
                                 "#e8a020" if ov.open_alerts else "#2ea44f"), xs=6, md=3),
            ],
            className="g-3",
        )

        type_counts = dbc.Row(
            [
                dbc.Col(
                    kpi_card(label(alarm_type), str(getattr(ov, field)),
                             "#e8a020" if getattr(ov, field) else "#2ea44f"),
                    xs=6, md=2,
                )
                for alarm_type, field in _TYPE_COUNT_FIELDS
            ],
            className="g-2",
        )

        status_cards = dbc.Row([_status_card(entry) for entry in service.devices_status()], className="g-3")

        alerts_df = service.recent_alarms(limit=10)
        if alerts_df.empty:
            alerts_table = html.Div("No recent alarms.", style={"color": MUTED, "padding": "12px"})
        else:
            rows = [
                html.Tr([
                    html.Td(row["created_at"].strftime("%m-%d %H:%M"), style={"fontSize": ".72rem", "color": MUTED}),
                    html.Td(html.Span(row["device_code"], style={"color": "#58a6ff", "fontSize": ".78rem"})),
                    html.Td(label(row["alarm_type"]), style={"fontSize": ".72rem"}),
                    html.Td(level_badge(row["alarm_level"])),
                    html.Td(row["description"][:70] + "…" if len(row["description"]) > 70 else row["description"],
                            style={"fontSize": ".70rem", "color": MUTED}),
                    html.Td(label(row["status"]), style={"fontSize": ".72rem"}),
                ])
                for _, row in alerts_df.iterrows()
            ]
            alerts_table = html.Table(
                [html.Thead(html.Tr([html.Th(h) for h in ["Time", "Device", "Type", "Level", "Description", "Status"]],
                                    style={"color": MUTED, "fontSize": ".65rem", "textTransform": "uppercase"})),
                 html.Tbody(rows)],
                style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".8rem"},
            )

        return kpi_banner, type_counts, status_cards, alerts_table
