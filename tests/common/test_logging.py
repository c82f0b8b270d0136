from __future__ import annotations

import logging

from arcdiff.common.logging import configure_logging


def test_http_loggers_are_quiet_by_default() -> None:
    configure_logging(level=logging.INFO, force=True)

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("hishel").level == logging.WARNING


def test_debug_leaves_http_loggers_alone() -> None:
    logging.getLogger("httpcore").setLevel(logging.NOTSET)

    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpcore").level == logging.NOTSET
