import os

import pytest

from smblogparser.models import ActionKind, LogEvent

SAMPLE_LOG = os.path.join(os.path.dirname(__file__), "..", "logs", "sample.log")

OPEN_HEADER = "[2025/09/09 13:01:08.165460, 2] ../open.c:1619(open_file)"
CLOSE_HEADER = "[2025/09/09 13:01:11.771830, 2] ../close.c:834(close_normal_file)"


@pytest.fixture
def open_header():
    return OPEN_HEADER


@pytest.fixture
def close_header():
    return CLOSE_HEADER


@pytest.fixture
def open_record():
    return OPEN_HEADER + "\n  alice opened file docs/report.dwg read=Yes write=No (numopen=3)"


@pytest.fixture
def audit_line():
    return "smbd_audit: bob|10.0.0.1|host1|share1|unlink|ok|docs/old.txt"


@pytest.fixture
def sample_log_path():
    return SAMPLE_LOG


@pytest.fixture
def make_event():
    def _make(user="alice", device="nas01", action=ActionKind.OPEN, file_path="a.txt"):
        return LogEvent(user=user, device=device, action=action, file_path=file_path)
    return _make


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "loki:\n"
        "  url: http://loki:3100/\n"
        "prometheus:\n"
        "  pushgateway_url: http://pushgateway:9091\n"
        "query:\n"
        "  query: '{job=\"samba\"}'\n"
        "  device: nas01\n",
        encoding="utf-8",
    )
    return str(path)
