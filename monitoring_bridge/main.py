from __future__ import annotations

import logging

from monitoring_bridge.app_factory import create_app
from monitoring_bridge.core.config import SETTINGS
from monitoring_bridge.core.logging import setup_logging

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)

# only app setup; `uvicorn monitoring_bridge.main:app` or `python -m monitoring_bridge`

app = create_app(SETTINGS)

logger.info(
    "monitoring bridge configured  env=%s log_level=%s port=%d provider=%s auth=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.state_provider or SETTINGS.app_state_url,
    "on" if SETTINGS.auth_enabled else "off",
)
