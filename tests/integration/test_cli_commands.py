"""Integration tests for the backtest-portfolio CLI.

Runs the summarize and limit-impact commands end to end on an export file,
through the loader, engine and formatters.
"""

import json

import pandas as pd
import pytest

from backtest_portfolio.cli.main import main


pytestmark = pytest.mark.integration


class TestSummarizeCommand:
    """Test cases for `backtest-portfolio summarize`."""

    def test_text_report_to_stdout(self, export_file, capsys):
        exit_code = main(["summarize", str(export_file), "--max-concurrent", "2"])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "PORTFOLIO SUMMARY" in out
        assert "Excluded:         1" in out

    def test_json_report_to_file(self, export_file, tmp_path):
        output = tmp_path / "report.json"

        exit_code = main(
            ["summarize", str(export_file), "--format", "json", "--output", str(output)]
        )

        data = json.loads(output.read_text(encoding="utf-8"))
        assert exit_code == 0
        assert data["config"]["max_concurrent_positions"] == 3
        assert data["summary"]["total_deals"] == 3
        assert data["summary"]["total_pnl"] == pytest.approx(38.5)

    def test_output_directory_gets_generated_name(self, export_file, tmp_path):
        exit_code = main(
            ["summarize", str(export_file), "--format", "json", "--output", str(tmp_path)]
        )

        written = list(tmp_path.glob("portfolio_summarize_*.json"))
        assert exit_code == 0
        assert len(written) == 1

    def test_log_file_holds_json_lines(self, export_file, tmp_path, capsys):
        log_file = tmp_path / "logs" / "run.jsonl"

        exit_code = main(
            ["summarize", str(export_file), "--log-level", "INFO",
             "--log-file", str(log_file)]
        )

        entries = [
            json.loads(line)
            for line in log_file.read_text(encoding="utf-8").splitlines()
        ]
        assert exit_code == 0
        assert any(
            entry["logger"] == "backtest_portfolio.io.loader"
            and entry["message"].startswith("Loaded 2 backtest records")
            for entry in entries
        )
        assert all(entry["timestamp"].endswith("Z") for entry in entries)

    def test_config_file_with_flag_override(self, export_file, tmp_path):
        config_path = tmp_path / "aggregation.json"
        config_path.write_text(json.dumps({"maxConcurrentPositions": 1}), encoding="utf-8")
        output = tmp_path / "report.json"

        main(["summarize", str(export_file), "--config", str(config_path),
              "--format", "json", "--output", str(output)])
        from_file = json.loads(output.read_text(encoding="utf-8"))

        main(["summarize", str(export_file), "--config", str(config_path),
              "--max-concurrent", "2", "--format", "json", "--output", str(output)])
        overridden = json.loads(output.read_text(encoding="utf-8"))

        assert from_file["config"]["max_concurrent_positions"] == 1
        assert overridden["config"]["max_concurrent_positions"] == 2

    def test_timeline_csv(self, export_file, tmp_path, capsys):
        csv_path = tmp_path / "timeline.csv"

        exit_code = main(
            ["summarize", str(export_file), "--max-concurrent", "2",
             "--timeline-csv", str(csv_path)]
        )

        frame = pd.read_csv(csv_path)
        assert exit_code == 0
        assert len(frame) == 3
        assert frame["limited_by_concurrency"].tolist().count(True) == 1

    def test_missing_input_exits_with_error(self, tmp_path):
        assert main(["summarize", str(tmp_path / "missing.json")]) == 1

    def test_invalid_limit_exits_with_error(self, export_file):
        assert main(["summarize", str(export_file), "--max-concurrent", "0"]) == 1

    def test_strict_mode_rejects_bad_cycle(self, tmp_path, sample_export):
        sample_export["backtests"][1]["cycles"][0]["orders"] = []
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(sample_export), encoding="utf-8")

        assert main(["summarize", str(path)]) == 0
        assert main(["summarize", str(path), "--strict"]) == 1


class TestLimitImpactCommand:
    """Test cases for `backtest-portfolio limit-impact`."""

    def test_json_points(self, export_file, capsys):
        exit_code = main(["limit-impact", str(export_file), "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert [point["label"] for point in data["points"]] == ["1", "2", "∞"]
        assert [point["excluded_deals"] for point in data["points"]] == [2, 1, 0]

    def test_text_table(self, export_file, capsys):
        assert main(["limit-impact", str(export_file), "--max-limit", "3"]) == 0
        assert "CONCURRENCY LIMIT IMPACT" in capsys.readouterr().out

    def test_invalid_max_limit(self, export_file):
        assert main(["limit-impact", str(export_file), "--max-limit", "0"]) == 1
