"""WSGI entrypoint for Passenger-style hosting of the ngtax backend."""

import logging
import os

from ngtax.backend.app import create_app

logging.basicConfig(level=os.getenv("NGTAX_LOG_LEVEL", "INFO").upper())

# Passenger expects a module-level variable named ``application``.
application = create_app()
