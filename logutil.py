import os
import logging
import config

_sequence = None

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

logger = logging.getLogger("blockmirror")
if getattr(config, "LOG_LEVEL", None) is not None:
    logger.setLevel(config.LOG_LEVEL)


def set_sequence(seq):
    global _sequence
    _sequence = seq


def log(scope, msg, level="INFO"):
    if scope == "BLOCK" and not getattr(config, "LOG_BLOCK_UPDATES", False):
        return
    if scope == "COLUMN" and not getattr(config, "LOG_COLUMN_LOADS", True):
        return
    lvl = LEVELS.get(level, logging.INFO)
    if not logger.isEnabledFor(lvl):
        return
    seq_tag = f" p{_sequence}" if _sequence is not None else ""
    text = f"[{level}{seq_tag} {scope}] {msg}"
    use_color = getattr(config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    if use_color:
        if lvl >= logging.ERROR:
            text = f"\x1b[31m{text}\x1b[0m"
        elif lvl >= logging.WARNING:
            text = f"\x1b[33m{text}\x1b[0m"
    logger.log(lvl, text)
