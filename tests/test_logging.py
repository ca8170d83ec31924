import logging
import logging.handlers

from storefront.logging import setup_logging


def test_setup_logging_writes_to_rotating_file(tmp_path):
    log_dir = tmp_path / "logs"

    setup_logging("debug", log_dir=str(log_dir))
    logging.getLogger("storefront.test").info("hello from the test")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    file_handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "hello from the test" in (log_dir / "storefront.log").read_text(encoding="utf-8")

    for handler in file_handlers:
        root.removeHandler(handler)
        handler.close()
