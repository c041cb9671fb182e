"""
src/callbacks/settings.py
──────────────────────────
Threshold editor callbacks.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import ALL, Input, Output, State, html

from src.data.errors import MonitorError
from src.services.monitoring import MonitoringService


def register(app, service: MonitoringService) -> None:

    @app.callback(
        Output({"type": "threshold-input", "key": ALL}, "value"),
        Input("url", "pathname"),
        State({"type": "threshold-input", "key": ALL}, "id"),
    )
    def load_thresholds(pathname: str, ids: list[dict]):
        current = service.config.get_all()
        return [float(current[i["key"]]) if i["key"] in current else None for i in ids]

    @app.callback(
        Output("settings-feedback", "children"),
        Input("settings-save-btn", "n_clicks"),
        [
            State({"type": "threshold-input", "key": ALL}, "value"),
            State({"type": "threshold-input", "key": ALL}, "id"),
        ],
        prevent_initial_call=True,
    )
    def save_thresholds(n_clicks: int, values: list, ids: list[dict]):
        errors = []
        for component_id, value in zip(ids, values, strict=True):
            try:
                service.update_threshold(component_id["key"], value)
            except MonitorError as exc:
                errors.append(str(exc))

        if errors:
            return dbc.Alert([html.Div(e) for e in errors], color="danger", className="py-2")
        return dbc.Alert("Thresholds saved.", color="success", duration=3000, className="py-2")
