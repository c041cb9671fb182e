"""
src/layout/components/alert_badge.py
──────────────────────────────────────
Colour-coded badges for alarm levels, alert states and device states.
"""

from dash import html

from config.alarms import ALERT_STATUS_COLORS, LEVEL_COLORS, STATUS_COLORS, label
from config.settings import settings

MUTED = "#8b949e"


def _badge(text: str, color: str) -> html.Span:
    return html.Span(
        text,
        style={
            "fontSize": ".65rem",
            "fontWeight": "700",
            "color": color,
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "1px 7px",
            "whiteSpace": "nowrap",
        },
    )


def level_badge(level: str, lang: str = settings.DEFAULT_LANG) -> html.Span:
    return _badge(label(level, lang), LEVEL_COLORS.get(level, MUTED))


def alert_status_badge(status: str, lang: str = settings.DEFAULT_LANG) -> html.Span:
    return _badge(label(status, lang), ALERT_STATUS_COLORS.get(status, MUTED))


def device_status_badge(status: str, lang: str = settings.DEFAULT_LANG) -> html.Span:
    return _badge(label(status, lang), STATUS_COLORS.get(status, MUTED))
