import logging
import unittest

from resizer.logging_config import logger_formatter


class TestLoggerFormatter(unittest.TestCase):

    def test_line_layout(self):
        record = logging.LogRecord(
            name="resizer.services.encode_service",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Цель %d Б недостижима",
            args=(1024,),
            exc_info=None,
        )
        line = logger_formatter().format(record)
        self.assertRegex(
            line,
            r"^\d{2}-\d{2}-\d{4} \d{2}:\d{2}:\d{2}.* \[WARNING\] Цель 1024 Б недостижима$",
        )
        self.assertNotIn("resizer.services", line)


if __name__ == "__main__":
    unittest.main()
