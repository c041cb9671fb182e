"""
app.py
──────
Cable Channel Monitor: application entry point.

Startup sequence:
  1. Configure logging, open the SQLite database, create tables and defaults
  2. Seed simulated history on first run (SEED_ON_START)
  3. Create Dash app with DARKLY bootstrap theme
  4. Register all callbacks
  5. Run dev server (or expose `server` for gunicorn in production)
"""
import logging

import dash
import dash_bootstrap_components as dbc

from config.settings import settings
from src.app_logger import configure_logging
from src.data.simulator import seed_history
from src.data.store import Database, initialize_db
from src.layout.main import create_layout
from src.services.monitoring import MonitoringService

# ── 1. Database ───────────────────────────────────────────────────────────────
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("cable_monitor")

db = Database(settings.DATABASE_URL)
initialize_db(db)
service = MonitoringService(db)

# ── 2. Simulated history ──────────────────────────────────────────────────────
if settings.SEED_ON_START:
    logger.info("Seeding simulated readings...")
    seed_history(service)
logger.info("Database ready at %s", settings.DATABASE_URL)

# ── 3. Dash app ───────────────────────────────────────────────────────────────
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.DARKLY],
    suppress_callback_exceptions=True,
    meta_tags=[{"name": "viewport", "content": "width=device-width, initial-scale=1"}],
    title="Cable Monitor",
)

server = app.server  # gunicorn entry point
app.layout = create_layout()

# ── 4. Register callbacks ─────────────────────────────────────────────────────
from src.callbacks import alerts, devices, navigation, settings as settings_callbacks

navigation.register(app, service)
devices.register(app, service)
alerts.register(app, service)
settings_callbacks.register(app, service)

# ── 5. Run ────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app.run(
        debug=settings.DEBUG,
        host=settings.HOST,
        port=settings.PORT,
    )
