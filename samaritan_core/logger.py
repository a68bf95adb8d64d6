import logging, json, sys, time, os

ROOT_LOGGER = "Samaritan"

_level = None


def _default_level():
    return _level or os.getenv("SAM_LOG_LEVEL", "INFO").upper()


def set_log_level(level):
    """Apply ``level`` to every Samaritan logger, existing and future."""
    global _level
    _level = str(level).upper()
    prefix = ROOT_LOGGER + "."
    for name in list(logging.root.manager.loggerDict):
        if name == ROOT_LOGGER or name.startswith(prefix):
            logging.getLogger(name).setLevel(_level)


def get_logger(name=ROOT_LOGGER, level=None, to_file=None):
    """Structured JSON logger shared by every samaritan_core component."""
    logger = logging.getLogger(name)
    logger.setLevel(level or _default_level())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
