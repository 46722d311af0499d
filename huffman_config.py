# filename: huffman_config.py

import logging
import os
from dataclasses import dataclass, replace

DEFAULT_CHUNK_SIZE = 65536
HEADER_FORMATS = ("binary", "text")

ENV_CHUNK_SIZE = "HUFFMAN_CHUNK_SIZE"
ENV_HEADER_FORMAT = "HUFFMAN_HEADER_FORMAT"
ENV_LOG_LEVEL = "HUFFMAN_LOG_LEVEL"


@dataclass(frozen=True)
class CodecConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    header_format: str = "binary"
    log_level: str = "WARNING"

    def validate(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.header_format not in HEADER_FORMATS:
            raise ValueError(
                f"unknown header format {self.header_format!r}, "
                f"expected one of {', '.join(HEADER_FORMATS)}"
            )
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"unknown log level {self.log_level!r}")
        return self


def load_config(environ=None, **overrides):
    """
    Build a CodecConfig from defaults, then environment variables, then
    explicit keyword overrides. Overrides set to None are ignored so that
    unset command-line flags fall through to the environment.
    """
    environ = os.environ if environ is None else environ
    values = {}

    chunk_size = environ.get(ENV_CHUNK_SIZE)
    if chunk_size:
        try:
            values["chunk_size"] = int(chunk_size)
        except ValueError:
            raise ValueError(f"{ENV_CHUNK_SIZE} must be an integer, got {chunk_size!r}") from None
    header_format = environ.get(ENV_HEADER_FORMAT)
    if header_format:
        values["header_format"] = header_format.strip().lower()
    log_level = environ.get(ENV_LOG_LEVEL)
    if log_level:
        values["log_level"] = log_level.strip().upper()

    values.update({key: value for key, value in overrides.items() if value is not None})
    return replace(CodecConfig(), **values).validate()
