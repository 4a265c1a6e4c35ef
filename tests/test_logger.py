from __future__ import annotations

import logging

from defi_overview.logger import TRACE, ColoredFormatter


def test_colored_formatter_restores_levelname():
    record = logging.LogRecord("defi_overview", logging.WARNING, __file__, 1, "careful", None, None)

    output = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)

    assert "\033[33m" in output
    assert output.endswith("careful")
    assert record.levelname == "WARNING"


def test_trace_level_registered():
    assert logging.getLevelName(TRACE) == "TRACE"
