"""
package logging

one stream handler on stderr for the whole gemm_bench tree, level from
GEMM_BENCH_LOG_LEVEL (default WARNING)
"""

import logging
import os
import sys

LOG_LEVEL_ENV = "GEMM_BENCH_LOG_LEVEL"
_ROOT_NAME = "gemm_bench"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _level_from_env() -> int:
    env_level = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    if env_level in _LEVELS:
        return _LEVELS[env_level]
    print(
        f"Warning: invalid {LOG_LEVEL_ENV} '{env_level}', valid levels are {', '.join(_LEVELS)}. Using WARNING.",
        file=sys.stderr,
    )
    return logging.WARNING


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        root.addHandler(handler)
        root.propagate = False
        root.setLevel(_level_from_env())
    return root


def get_logger(name: str = _ROOT_NAME) -> logging.Logger:
    _configure_root()
    return logging.getLogger(name)


def set_log_level(level: str) -> None:
    _configure_root().setLevel(_LEVELS[level.upper()])
