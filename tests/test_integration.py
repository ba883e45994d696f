"""Integration tests: full pipeline through main.py against logs/sample.log."""

import csv
import json
import logging
import os
import subprocess
import sys
from unittest.mock import patch

import main
from smblogparser.aggregator import aggregate
from smblogparser.parsers import parse_records
from smblogparser.sources import read_log_file

MAIN_PY = os.path.join(os.path.dirname(__file__), "..", "main.py")


class TestSamplePipeline:
    def test_counts(self, sample_log_path):
        events = parse_records(read_log_file(sample_log_path), "nas01")
        assert len(events) == 9

        metrics = aggregate(events)
        assert set(metrics) == {"alice|nas01", "bob|nas01", "carol|nas01"}

        alice = metrics["alice|nas01"]
        assert (alice.create, alice.open, alice.modify, alice.delete) == (0, 1, 1, 0)
        bob = metrics["bob|nas01"]
        assert (bob.create, bob.open, bob.modify, bob.delete) == (2, 0, 0, 1)
        carol = metrics["carol|nas01"]
        assert (carol.create, carol.open, carol.modify, carol.delete) == (0, 0, 1, 0)

        assert sum(m.total for m in metrics.values()) == 6


class TestMain:
    def test_dry_run_does_not_push(self, config_file, sample_log_path, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        with patch("smblogparser.publisher.push_to_gateway") as push:
            code = main.main(["--config", config_file, "--file", sample_log_path, "--dry-run"])
        assert code == 0
        push.assert_not_called()

    def test_push(self, config_file, sample_log_path, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        with patch("smblogparser.publisher.push_to_gateway") as push:
            code = main.main(["--config", config_file, "--file", sample_log_path])
        assert code == 0
        push.assert_called_once()
        assert push.call_args.kwargs["job"] == "smblogparser"

    def test_loki_source(self, config_file, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        lines = [
            "[2025/09/09 13:01:08.165460, 2] ../open.c:1619(open_file)",
            "  alice opened file a read=Yes write=No (numopen=1)",
        ]
        with patch("smblogparser.sources.LokiClient.query_range", return_value=lines) as query, \
                patch("smblogparser.publisher.push_to_gateway") as push:
            code = main.main(["--config", config_file])
        assert code == 0
        assert query.call_args.args[0] == '{job="samba"}'
        push.assert_called_once()

    def test_export_csv(self, config_file, sample_log_path, tmp_path, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        out = tmp_path / "events.csv"
        code = main.main([
            "--config", config_file, "--file", sample_log_path,
            "--dry-run", "--export-csv", str(out),
        ])
        assert code == 0
        with open(out, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert len(rows) == 10  # header + 9 events

    def test_print_events(self, config_file, sample_log_path, capsys, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        main.main(["--config", config_file, "--file", sample_log_path, "--dry-run", "--print-events"])
        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 9
        assert json.loads(lines[0])["user"] == "alice"

    def test_unwritable_export_exits_1(self, config_file, sample_log_path, tmp_path,
                                       caplog, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        out = tmp_path / "missing_dir" / "events.csv"
        code = main.main([
            "--config", config_file, "--file", sample_log_path,
            "--dry-run", "--export-csv", str(out),
        ])
        assert code == 1
        assert "failed to write CSV export" in caplog.text
        assert "Failed to read logs" not in caplog.text

    def test_malformed_pushgateway_url_exits_1(self, tmp_path, sample_log_path, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "prometheus:\n  pushgateway_url: http://pushgateway:notaport\n",
            encoding="utf-8",
        )
        assert main.main(["--config", str(path), "--file", sample_log_path]) == 1

    def test_stats_json(self, config_file, sample_log_path, capsys, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        main.main(["--config", config_file, "--file", sample_log_path, "--dry-run", "--stats"])
        data = json.loads(capsys.readouterr().out)
        assert data["records_total"] == 10
        assert data["events_recognized"] == 9
        assert data["records_skipped"] == 1
        assert data["events_counted"] == 6
        assert data["events_dropped"] == 3

    def test_operation_total_logged(self, config_file, sample_log_path, caplog, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        with caplog.at_level(logging.INFO):
            main.main(["--config", config_file, "--file", sample_log_path, "--dry-run"])
        assert "Aggregated metrics for 3 users (6 operations)" in caplog.text

    def test_missing_config_exits_1(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        assert main.main(["--config", str(tmp_path / "missing.yaml")]) == 1

    def test_missing_log_file_exits_1(self, config_file, monkeypatch):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        assert main.main(["--config", config_file, "--file", "/nonexistent/smb.log", "--dry-run"]) == 1


class TestSubprocess:
    def test_dry_run_exit_code(self, config_file, sample_log_path):
        env = dict(os.environ)
        env.pop("CONFIG_PATH", None)
        result = subprocess.run(
            [sys.executable, MAIN_PY, "--config", config_file, "--file", sample_log_path, "--dry-run"],
            capture_output=True,
            text=True,
            env=env,
        )
        assert result.returncode == 0
        assert "Aggregated metrics for 3 users" in result.stderr
