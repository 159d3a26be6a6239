from __future__ import annotations

import logging
import logging.config


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure console logging for the searchops entrypoints."""
    loglevel = logging.getLevelName(level.upper())
    if not isinstance(loglevel, int):
        loglevel = logging.INFO
    debug_mode = loglevel <= logging.DEBUG

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                # stderr keeps stdout free for the stdio MCP transport
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "level": loglevel,
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {"handlers": ["console"], "level": loglevel},
        }
    )

    # Suppress httpx request logs unless in debug mode
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug_mode else logging.WARNING)
    return logging.getLogger("searchops")
