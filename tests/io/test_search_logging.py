import io
import json
import logging
import sys

import pytest

from path_sim.domain.errors import InvalidStateError
from path_sim.domain.graph import load_graph
from path_sim.io.recorder import JsonlSink, NodeTouched, Recorder
from path_sim.io.search_logging import SearchLogFormatter, SearchLogging, search_logger
from path_sim.search.engine import SearchEngine


def _graph():
    return load_graph(
        [("A", 50.0, 14.0), ("B", 50.001, 14.0), ("C", 50.002, 14.0), ("X", 0.0, 0.0)],
        [("A", "B", 1.0), ("B", "C", 1.0)],
    )


def _logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    return logger


def test_lifecycle_logged_at_info(caplog):
    caplog.set_level(logging.DEBUG, logger="test.search.info")
    hooks = SearchLogging(run_id="r-9", logger=_logger("test.search.info"))
    e = SearchEngine(hooks=hooks)
    e.start(_graph(), "A", "C")
    e.run()
    msgs = [(r.levelname, r.getMessage()) for r in caplog.records]
    assert msgs == [("INFO", "search_start"), ("INFO", "search_end")]
    end = caplog.records[-1].extra
    assert end["run_id"] == "r-9"
    assert end["outcome"] == "found" and end["steps"] == 3


def test_debug_steps_are_sampled(caplog):
    caplog.set_level(logging.DEBUG, logger="test.search.debug")
    hooks = SearchLogging(debug=True, sample_every=2, logger=_logger("test.search.debug"))
    e = SearchEngine(hooks=hooks)
    e.start(_graph(), "A", "C")
    e.run()
    steps = [r.extra["seq"] for r in caplog.records if r.getMessage() == "step"]
    assert steps == [2]


def test_unreachable_and_errors_raise_level(caplog):
    caplog.set_level(logging.DEBUG, logger="test.search.warn")
    hooks = SearchLogging(logger=_logger("test.search.warn"))
    e = SearchEngine(hooks=hooks)
    e.start(_graph(), "A", "X")
    e.run()
    assert caplog.records[-1].levelname == "WARNING"
    assert caplog.records[-1].extra["outcome"] == "unreachable"
    with pytest.raises(InvalidStateError):
        e.start(_graph(), "nope", "A")
    assert caplog.records[-1].levelname == "ERROR"
    assert caplog.records[-1].extra["reason"] == "origin_not_in_graph"


def test_search_logger_writes_json_lines():
    buf = io.StringIO()
    logger = search_logger(name="test.search.json", level="INFO", stream=buf)
    hooks = SearchLogging(run_id="r-3", logger=logger)
    e = SearchEngine(hooks=hooks)
    e.start(_graph(), "A", "C")
    e.run()
    lines = [json.loads(s) for s in buf.getvalue().splitlines()]
    assert [ln["event"] for ln in lines] == ["search_start", "search_end"]
    end = lines[-1]
    assert end["level"] == "INFO" and end["logger"] == "test.search.json"
    assert end["run_id"] == "r-3" and end["outcome"] == "found"
    assert isinstance(end["ts"], float)


def test_formatter_includes_exception_text():
    try:
        raise OSError("socket closed")
    except OSError:
        record = logging.getLogger("test.search.exc").makeRecord(
            "test.search.exc", logging.ERROR, __file__, 1, "search_error", None, sys.exc_info(),
        )
    line = json.loads(SearchLogFormatter().format(record))
    assert line["event"] == "search_error"
    assert "OSError: socket closed" in line["exc"]


def test_jsonl_sink_writes_one_line_per_event():
    buf = io.StringIO()
    rec = Recorder(JsonlSink(buf))
    rec.emit(NodeTouched("r", 1, "B", "A", 1.0, 50.0, 14.0))
    out = json.loads(buf.getvalue().strip())
    assert out["event"] == "NodeTouched" and out["referer_id"] == "A"


def test_failing_sink_does_not_break_recording(caplog):
    class Boom:
        def write(self, ev):
            raise OSError("disk full")

    good = io.StringIO()
    rec = Recorder(Boom(), JsonlSink(good))
    rec.emit(NodeTouched("r", 1, "B", None, 1.0, 50.0, 14.0))
    assert good.getvalue()
    assert "sink Boom failed" in caplog.text
