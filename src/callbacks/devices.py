"""
src/callbacks/devices.py
─────────────────────────
Device detail page callbacks.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
import plotly.graph_objects as go
from dash import Input, Output, State, ctx, html, no_update

from config.alarms import ESCALATION_FACTOR, label
from config.devices import DISPLACEMENT_THRESHOLD, HUMIDITY_THRESHOLD, VIBRATION_THRESHOLD
from src.data.errors import MonitorError
from src.data.simulator import generate_realtime_reading
from src.layout.components.alert_badge import alert_status_badge, device_status_badge, level_badge
from src.layout.components.kpi_card import reading_kpi
from src.services.monitoring import MonitoringService

CARD_BG = "#161b22"
GRID_CLR = "#30363d"
MUTED = "#8b949e"
PLOTLY_TMPL = "plotly_dark"

_VARIABLE_LABELS = {
    "vibration_level": "Vibration (Hz)",
    "displacement": "Displacement (mm)",
    "humidity_index": "Humidity index (%)",
    "signal_strength": "Signal strength (%)",
    "current_strength": "Current strength (%)",
}

# Variables that have a configured alarm threshold
_THRESHOLD_FOR = {
    "vibration_level": VIBRATION_THRESHOLD,
    "displacement": DISPLACEMENT_THRESHOLD,
    "humidity_index": HUMIDITY_THRESHOLD,
}


def _layout(height: int = 300) -> dict:
    return {
        "template": PLOTLY_TMPL,
        "paper_bgcolor": CARD_BG,
        "plot_bgcolor": CARD_BG,
        "margin": {"l": 10, "r": 10, "t": 10, "b": 10},
        "font": {"color": "#c9d1d9", "size": 11},
        "xaxis": {"gridcolor": GRID_CLR},
        "yaxis": {"gridcolor": GRID_CLR},
        "legend": {"bgcolor": "rgba(0,0,0,0)", "font": {"size": 10}},
        "height": height,
        "showlegend": True,
    }


def _latest_panel(service: MonitoringService, device_code: str) -> html.Div:
    device = service.devices.get(device_code)
    if device is None:
        return html.Div(f"Device {device_code} does not exist.", style={"color": MUTED})
    latest = service.readings.latest(device_code)

    header = html.Div(
        [
            html.Span(device.device_code, style={"fontWeight": "700", "color": "#58a6ff", "fontSize": "1rem"}),
            html.Span(f"{device.name} · {device.location}", style={"fontSize": ".72rem", "color": MUTED, "marginLeft": "10px"}),
            html.Span(device_status_badge(device.status), style={"float": "right"}),
        ],
        style={"marginBottom": "12px"},
    )
    if latest is None:
        return html.Div([header, html.Div("No readings yet.", style={"color": MUTED})])

    thresholds = service.config.get_all()
    vib_thr = float(thresholds.get(VIBRATION_THRESHOLD, "inf"))
    disp_thr = float(thresholds.get(DISPLACEMENT_THRESHOLD, "inf"))

    return html.Div(
        [
            header,
            html.Div(
                [
                    reading_kpi("Leak", "yes" if latest["leak_detected"] else "no", bool(latest["leak_detected"])),
                    reading_kpi("Humidity", f"{latest['humidity_index']:.1f} %"),
                    reading_kpi("Vibration", f"{latest['vibration_level']:.2f} Hz", latest["vibration_level"] > vib_thr),
                    reading_kpi("Displacement", f"{latest['displacement']:.2f} mm", latest["displacement"] > disp_thr),
                    reading_kpi("Cable", "present" if latest["cable_present"] else "missing", not latest["cable_present"]),
                    reading_kpi("Signal", f"{latest['signal_strength']:.0f} %"),
                    reading_kpi("Power", "on" if latest["power_status"] else "off", not latest["power_status"]),
                    reading_kpi("Current", f"{latest['current_strength']:.0f} %"),
                ],
                style={"display": "grid", "gridTemplateColumns": "repeat(4, 1fr)", "gap": "10px"},
            ),
            html.Div(f"Recorded at {latest['recorded_at'][:19].replace('T', ' ')}",
                     style={"fontSize": ".68rem", "color": MUTED, "marginTop": "10px"}),
        ]
    )


def _alarms_table(service: MonitoringService, device_code: str) -> html.Div:
    df = service.device_alarms(device_code, limit=20)
    if df.empty:
        return html.Div("No alarms recorded for this device.", style={"color": MUTED, "padding": "12px"})
    rows = [
        html.Tr([
            html.Td(row["created_at"].strftime("%Y-%m-%d %H:%M"), style={"fontSize": ".72rem", "color": MUTED}),
            html.Td(label(row["alarm_type"]), style={"fontSize": ".75rem"}),
            html.Td(level_badge(row["alarm_level"])),
            html.Td(row["description"], style={"fontSize": ".70rem", "color": MUTED}),
            html.Td(alert_status_badge(row["status"])),
        ])
        for _, row in df.iterrows()
    ]
    return html.Table(
        [html.Thead(html.Tr([html.Th(h) for h in ["Time", "Type", "Level", "Description", "Status"]],
                            style={"color": MUTED, "fontSize": ".65rem", "textTransform": "uppercase"})),
         html.Tbody(rows)],
        style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".8rem"},
    )


def device_options(service: MonitoringService, include_all: bool = False) -> list[dict]:
    """Dropdown options for every registered device, read from the registry."""
    options = [{"label": f"{d.device_code} · {d.name}", "value": d.device_code} for d in service.devices.list_devices()]
    if include_all:
        options.insert(0, {"label": "All", "value": "all"})
    return options


def register(app, service: MonitoringService) -> None:

    @app.callback(
        [
            Output("device-selector", "options"),
            Output("device-selector", "value"),
        ],
        Input("url", "pathname"),
        State("device-selector", "value"),
    )
    def load_device_options(pathname: str, current: str | None):
        options = device_options(service)
        codes = [o["value"] for o in options]
        if current in codes:
            return options, current
        return options, codes[0] if codes else None

    @app.callback(
        [
            Output("device-latest", "children"),
            Output("device-history-chart", "figure"),
            Output("device-chart-title", "children"),
            Output("device-alarms-table", "children"),
        ],
        [
            Input("device-selector", "value"),
            Input("device-variable", "value"),
            Input("device-limit", "value"),
            Input("device-action-feedback", "children"),
            Input("interval-live", "n_intervals"),
        ],
    )
    def update_device(device_code: str, variable: str, limit: int, feedback, n_intervals: int):
        var_label = _VARIABLE_LABELS.get(variable, variable)
        chart_title = f"{device_code} — {var_label}"
        fig = go.Figure()

        if not device_code or service.devices.get(device_code) is None:
            fig.update_layout(**_layout())
            return html.Div("Select a device.", style={"color": MUTED}), fig, chart_title, html.Div()

        df = service.history(device_code, limit=int(limit))
        if not df.empty:
            df = df.sort_values(["recorded_at", "id"])
            fig.add_scatter(
                x=df["recorded_at"],
                y=df[variable],
                mode="lines+markers",
                line={"color": "#58a6ff", "width": 1.3},
                marker={"size": 3},
                name=var_label,
                hovertemplate="%{x|%m-%d %H:%M}<br>%{y:.2f}<extra></extra>",
            )

            key = _THRESHOLD_FOR.get(variable)
            raw = service.config.get_all().get(key) if key else None
            if raw is not None:
                thr = float(raw)
                fig.add_hline(y=thr, line_dash="dot", line_color="#e8a020", line_width=1,
                              annotation_text="Threshold", annotation_font_color="#e8a020", annotation_font_size=9)
                if variable != "humidity_index":
                    fig.add_hline(y=thr * ESCALATION_FACTOR, line_dash="solid", line_color="#da3633", line_width=1,
                                  annotation_text="Critical", annotation_font_color="#da3633", annotation_font_size=9)

        fig.update_layout(**_layout(300))
        return _latest_panel(service, device_code), fig, chart_title, _alarms_table(service, device_code)

    @app.callback(
        Output("device-action-feedback", "children"),
        [
            Input("device-inject-btn", "n_clicks"),
            Input("device-test-btn", "n_clicks"),
        ],
        [
            State("device-selector", "value"),
            State("device-test-type", "value"),
        ],
        prevent_initial_call=True,
    )
    def run_device_action(n_inject: int, n_test: int, device_code: str, alarm_type: str):
        if not device_code:
            return no_update
        try:
            if ctx.triggered_id == "device-inject-btn":
                result = service.ingest(device_code, generate_realtime_reading(device_code))
                message = f"Reading {result.reading_id} stored · status {label(result.status)} · {len(result.alarms)} new alarm(s)"
            else:
                alarm = service.trigger_test_alarm(device_code, alarm_type)
                message = (
                    f"Test alarm {alarm.id} raised."
                    if alarm is not None
                    else f"A {label(alarm_type)} alarm is already open for {device_code}."
                )
        except MonitorError as exc:
            return dbc.Alert(str(exc), color="danger", className="py-2")
        return dbc.Alert(message, color="success", duration=4000, className="py-2")
