"""Unit tests for structlog configuration."""

import structlog

from infrastructure.logging import build_processors, configure_logging


class TestBuildProcessors:
    def test_json_renderer_without_colors(self):
        processors = build_processors(colors=False)

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.contextvars.merge_contextvars in processors

    def test_console_renderer_with_colors(self):
        processors = build_processors(colors=True)

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


class TestConfigureLogging:
    def test_force_color_selects_console(self, monkeypatch):
        monkeypatch.setenv("FORCE_COLOR", "1")

        configure_logging(debug=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def teardown_method(self):
        structlog.reset_defaults()
