#!/usr/bin/env python3
"""
Run the TaskFlow API under uvicorn with the host, port and reload options
from Settings.SERVER
"""

import logging

import uvicorn

from app.config.settings import Settings
from app.logging_setup import setup_logging

logger = logging.getLogger("start_server")

def uvicorn_options(overrides: dict = None) -> dict:
    options = {
        "host": Settings.SERVER['host'],
        "port": Settings.SERVER['port'],
        "reload": Settings.SERVER['reload'],
        "log_level": Settings.LOGGING['level'].lower(),
        # logging_setup owns the root handlers
        "log_config": None,
    }
    options.update(overrides or {})
    return options

def main():
    setup_logging(Settings.LOGGING['level'])
    options = uvicorn_options()
    logger.info(
        "Starting TaskFlow API on %s:%s (reload=%s, database=%s)",
        options["host"], options["port"], options["reload"],
        "sqlite" if Settings.is_sqlite() else "postgres",
    )
    uvicorn.run("main:app", **options)

if __name__ == "__main__":
    main()
