from __future__ import annotations

import logging

from larder.common import configure_logging


def test_configure_logging_sets_level_and_quiets_http_libraries() -> None:
    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging(force=True)

    assert logging.getLogger().level == logging.INFO
