import logging
import logging.config

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "proctorview": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}


def setup_logging(level: str = "INFO"):
    """Apply the console logging configuration for the proctorview loggers."""
    config = dict(LOGGING_CONFIG)
    config["loggers"] = {
        "proctorview": {**LOGGING_CONFIG["loggers"]["proctorview"], "level": level.upper()},
    }
    logging.config.dictConfig(config)
