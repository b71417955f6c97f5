"""
Tests for rubystrap logging setup
"""
import logging

import pytest

from rubystrap.core.logging import HANDLER_NAME, setup_logging


@pytest.fixture
def clean_root():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)
    root.setLevel(level)


class TestSetupLogging:

    def test_level_names(self, clean_root):
        handler = setup_logging('debug')
        assert clean_root.level == logging.DEBUG
        assert handler.level == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self, clean_root):
        setup_logging('chatty')
        assert clean_root.level == logging.WARNING

    def test_handler_installed_once(self, clean_root):
        first = setup_logging('info')
        second = setup_logging('error')
        assert first is second
        assert [h.get_name() for h in clean_root.handlers].count(HANDLER_NAME) == 1
        assert second.level == logging.ERROR
