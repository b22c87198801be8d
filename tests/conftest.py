"""
Общие фикстуры тестов.
"""

import logging

import pytest

from sftp_filer.logger import LOGGER_NAME


@pytest.fixture(autouse=True)
def close_filer_logger():
    """Закрывает обработчики логгера после каждого теста."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
