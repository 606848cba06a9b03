"""
cpack configuration - environment variables only; the CLI has no option flags.

  CPACK_SYMBOL_PREFIX  accessor prefix, default "mg_" (mg_unlist, mg_unpack)
  CPACK_LOG_LEVEL      logging level name for stderr diagnostics, default WARNING
  CPACK_CHUNK_SIZE     read size in bytes per chunk, default 65536
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from cpack.errors import ConfigError
from cpack.format import DEFAULT_PREFIX, VALID_PREFIX
from cpack.sources import DEFAULT_CHUNK_SIZE

ENV_PREFIX = "CPACK_SYMBOL_PREFIX"
ENV_LOG_LEVEL = "CPACK_LOG_LEVEL"
ENV_CHUNK_SIZE = "CPACK_CHUNK_SIZE"


@dataclass(frozen=True)
class Config:
    prefix: str = DEFAULT_PREFIX
    log_level: int = logging.WARNING
    chunk_size: int = DEFAULT_CHUNK_SIZE


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Read settings from environ (default: os.environ). Raises ConfigError."""
    env = os.environ if environ is None else environ

    prefix = env.get(ENV_PREFIX, DEFAULT_PREFIX)
    if not VALID_PREFIX.match(prefix):
        raise ConfigError(f"{ENV_PREFIX} must be a C identifier prefix, got {prefix!r}")

    level_name = env.get(ENV_LOG_LEVEL, "WARNING").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigError(f"{ENV_LOG_LEVEL}: unknown level {level_name!r}")

    raw_chunk = env.get(ENV_CHUNK_SIZE, "")
    if raw_chunk:
        try:
            chunk_size = int(raw_chunk)
        except ValueError:
            raise ConfigError(f"{ENV_CHUNK_SIZE} must be an integer, got {raw_chunk!r}") from None
        if chunk_size <= 0:
            raise ConfigError(f"{ENV_CHUNK_SIZE} must be positive, got {chunk_size}")
    else:
        chunk_size = DEFAULT_CHUNK_SIZE

    return Config(prefix=prefix, log_level=level, chunk_size=chunk_size)
