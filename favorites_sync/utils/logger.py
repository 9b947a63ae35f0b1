# favorites_sync/utils/logger.py
import os
import logging

LEVELS = {"ERROR": 40, "WARN": 30, "INFO": 20, "DEBUG": 10, "NONE": 100}

_logger = logging.getLogger("favorites_sync")
_logger.setLevel(LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), 20))


def set_level(name: str):
    _logger.setLevel(LEVELS.get((name or "INFO").upper(), 20))

def get_logger() -> logging.Logger:
    return _logger

def debug(msg): _logger.debug(msg)
def info(msg):  _logger.info(msg)
def warn(msg):  _logger.warning(msg)
def error(msg): _logger.error(msg)
