from __future__ import annotations

import logging

from brocade.core.logging import configure_logging, reset_logging_for_tests


class TestConfigureLogging:
    def test_handler_is_installed_once_per_target(self) -> None:
        root = logging.getLogger("brocade")

        first = configure_logging(level="INFO")
        second = configure_logging(level="DEBUG")

        assert first is second
        assert root.handlers.count(first) == 1
        assert first.level == logging.DEBUG
        assert root.level == logging.DEBUG

    def test_file_target_replaces_stream_handler(self, tmp_path) -> None:
        stream = configure_logging()
        log_path = tmp_path / "logs" / "build.log"

        handler = configure_logging(level="info", log_path=log_path)
        logging.getLogger("brocade.core.composition.engine").info("engine ready")
        handler.flush()

        assert handler is not stream
        assert stream not in logging.getLogger("brocade").handlers
        assert "INFO brocade.core.composition.engine: engine ready" in log_path.read_text(encoding="utf-8")

    def test_reset_removes_handler(self) -> None:
        handler = configure_logging()

        reset_logging_for_tests()

        assert handler not in logging.getLogger("brocade").handlers

    def test_unknown_level_falls_back_to_info(self) -> None:
        assert configure_logging(level="chatty").level == logging.INFO
