# -*- coding: utf-8 -*-
"""Logging setup. Textual owns the terminal, so records go to a file."""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Optional, Union

HANDLER_NAME = "campus_coffee"


class JsonFormatter(logging.Formatter):
    def format(self, record):
        base = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base)


def configure_logging(level: str = "INFO", fmt: str = "text",
                      path: Optional[Union[str, Path]] = None) -> None:
    root = logging.getLogger()
    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return
    root.setLevel(level.upper())
    if path is not None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    else:
        handler = logging.NullHandler()
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    handler.set_name(HANDLER_NAME)
    root.addHandler(handler)
