import logging
import sys

from image_limiter import logger as il_logger


def _stderr_handlers(base: logging.Logger) -> list[logging.Handler]:
    return [
        h for h in base.handlers if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
    ]


def test_setup_logger_idempotent_handlers():
    """Calling setup_logger() repeatedly should leave exactly one stderr StreamHandler."""
    base = il_logger.setup_logger(level=logging.DEBUG)
    _ = il_logger.setup_logger(level=logging.DEBUG)
    _ = il_logger.get_logger("bounded_decoder")

    assert len(_stderr_handlers(base)) == 1
    assert base.propagate is False


def test_env_level_override(monkeypatch):
    monkeypatch.setenv("IMAGE_LIMITER_LOG_LEVEL", "warning")
    base = il_logger.setup_logger(level=logging.DEBUG)
    assert base.level == logging.WARNING

    monkeypatch.delenv("IMAGE_LIMITER_LOG_LEVEL")
    assert il_logger.setup_logger(level=logging.DEBUG).level == logging.DEBUG


def test_category_filter(monkeypatch):
    monkeypatch.setenv("IMAGE_LIMITER_LOG_CATS", "loader, decoder")
    base = il_logger.setup_logger()
    handler = _stderr_handlers(base)[0]

    def _record(name: str) -> logging.LogRecord:
        return logging.LogRecord(name, logging.INFO, __file__, 1, "msg", None, None)

    assert handler.filter(_record("image_limiter.loader"))
    assert handler.filter(_record("image_limiter.decoder"))
    assert not handler.filter(_record("image_limiter.bounded_decoder"))

    monkeypatch.delenv("IMAGE_LIMITER_LOG_CATS")
    handler = _stderr_handlers(il_logger.setup_logger())[0]
    assert handler.filter(_record("image_limiter.bounded_decoder"))


def test_get_logger_returns_child():
    assert il_logger.get_logger("raster").name == "image_limiter.raster"
    assert il_logger.get_logger().name == "image_limiter"
