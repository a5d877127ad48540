import json
import logging
from decimal import Decimal

import pytest

from lendkit.core.balance import format_magnitude, render_or_placeholder
from lendkit.logging_config import JSONFormatter, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in saved_handlers:
            h.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_setup_logging_rejects_unknown_format():
    with pytest.raises(ValueError):
        setup_logging(fmt="xml")


def test_human_console_line(capsys):
    print("[logging] human format -> single line with level and logger name")
    setup_logging(level="INFO", fmt="human")
    logging.getLogger("lendkit.test").info("decoded %s", Decimal("0.8"))
    err = capsys.readouterr().err.strip()
    assert err.endswith("[INFO   ] lendkit.test: decoded 0.8")


def test_placeholder_records_carry_field_name(tmp_path):
    print("[logging] json file output keeps the field that fell back to a placeholder")
    log_file = tmp_path / "logs" / "report.log"
    setup_logging(level="WARNING", fmt="json", log_file=str(log_file))
    r = render_or_placeholder(format_magnitude, "x", field="assetShares")
    assert not r.ok
    for h in logging.getLogger().handlers:
        h.flush()
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    print("records ->", records)
    assert records[-1]["level"] == "WARNING"
    assert records[-1]["logger"] == "lendkit.core.balance"
    assert records[-1]["field"] == "assetShares"


def test_json_formatter_without_field():
    record = logging.LogRecord("lendkit", logging.INFO, __file__, 1, "hello %d", (3,), None)
    obj = json.loads(JSONFormatter().format(record))
    assert obj["msg"] == "hello 3"
    assert "field" not in obj
