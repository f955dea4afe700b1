# io/search_logging.py
import json
import logging
import sys
from typing import TextIO

from path_sim.search.hooks import NoopHooks


class SearchLogFormatter(logging.Formatter):
    """One JSON object per record: ts, level, event, logger, then the search fields."""

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "ts": round(record.created, 3),
            "level": record.levelname,
            "event": record.getMessage(),
            "logger": record.name,
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            line.update(fields)
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, default=str)


def search_logger(
    name: str = "path_sim.search", level: str = "INFO", stream: TextIO | None = None
) -> logging.Logger:
    """Logger with a JSON handler on stderr (stdout carries the CLI result)."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(SearchLogFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level)
    return logger


class SearchLogging(NoopHooks):
    """
    One place to shape and emit structured logs for search lifecycle and step events.
    Lifecycle goes out at INFO; per-step lines only with debug=True, every sample_every steps.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug, self.sample_every = run_id, debug, max(1, sample_every)
        self.log = logger or search_logger(level=level)

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id, **extra}
        self.log.log(getattr(logging, level), msg, extra={"extra": payload})

    # search lifecycle

    def search_start(self, *, origin, target, nodes):
        self._emit("INFO", "search_start", origin=origin, target=target, nodes=nodes)

    def step(self, popped, *, seq, updated, frontier, visited):
        if self.debug and (seq % self.sample_every) == 0:
            self._emit(
                "DEBUG",
                "step",
                node=popped,
                seq=seq,
                updated=updated,
                frontier=frontier,
                visited=visited,
            )

    def search_end(self, *, outcome, steps, visited, wall_ms):
        level = "INFO" if outcome == "found" else "WARNING"
        self._emit(
            level, "search_end", outcome=outcome, steps=steps, visited=visited, wall_ms=wall_ms
        )

    def error(self, *, reason: str, **kw):
        self._emit("ERROR", "search_error", reason=reason, **kw)
