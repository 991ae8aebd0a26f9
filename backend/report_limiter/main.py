from __future__ import annotations

from .application import create_app
from .config import get_settings
from .logging_utils import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

app = create_app(settings)
