# fotocatalogo/logging_setup.py
import os, logging, sys
from . import config

_LEVEL_MAP = {
    "ERROR":   logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO":    logging.INFO,
    "DEBUG":   logging.DEBUG,
}

_state = {"level": config.LOG_LEVEL, "log_dir": config.LOG_DIR}
_configured: list[str] = []

def _build_formatter() -> logging.Formatter:
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    return logging.Formatter(fmt, datefmt)

def _get_log_file() -> str | None:
    try:
        os.makedirs(_state["log_dir"], exist_ok=True)
    except OSError:
        return None
    return os.path.join(_state["log_dir"], "app.log")

def _attach_handlers(logger: logging.Logger) -> None:
    level = _LEVEL_MAP.get(str(_state["level"]).upper(), logging.INFO)
    logger.setLevel(level)

    # File handler (si la carpeta no es escribible, sólo consola)
    log_file = _get_log_file()
    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level); fh.setFormatter(_build_formatter())
        logger.addHandler(fh)
    # Console handler (stderr)
    ch = logging.StreamHandler(stream=sys.stderr)
    ch.setLevel(level); ch.setFormatter(_build_formatter())
    logger.addHandler(ch)
    logger.propagate = False

def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    _attach_handlers(logger)
    _configured.append(name)
    return logger

def init_logging(level: str | None = None, log_dir: str | None = None) -> None:
    """
    Reconfigura nivel y carpeta de logs en caliente.
    Los loggers ya creados con get_logger() se rearman con los nuevos handlers.
    """
    if level:
        _state["level"] = str(level).upper()
    if log_dir:
        _state["log_dir"] = log_dir
    for name in _configured:
        logger = logging.getLogger(name)
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        _attach_handlers(logger)
