"""CLI tests."""

import json

import pytest

from cli import main


@pytest.fixture
def snapshot_file(tmp_path, sample_snapshot_json):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(sample_snapshot_json), encoding="utf-8")
    return path


WINDOW = ["--period", "custom", "--start", "2026-03-08", "--end", "2026-03-15"]


class TestCli:
    def test_revenue(self, snapshot_file, capsys):
        assert main(["revenue", str(snapshot_file), *WINDOW, "--compare"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["data"]["current"]["total_revenue"] == "140.00"
        assert out["data"]["previous"]["total_revenue"] == "70.00"

    def test_report(self, snapshot_file, capsys):
        assert main(["report", str(snapshot_file), *WINDOW, "--granularity", "weekly"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert set(out["data"]) == {"revenue", "products", "customers", "orders"}
        assert len(out["data"]["orders"]["orders_over_time"]) == 2

    def test_products_limit(self, snapshot_file, capsys):
        assert main(["products", str(snapshot_file), *WINDOW, "--limit", "1"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert [p["product_id"] for p in out["data"]["top_products_by_units"]] == ["P-A"]

    def test_segments_filter(self, snapshot_file, capsys):
        assert main(["segments", str(snapshot_file), "--segment", "Inactive"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert [c["id"] for c in out["customers"]] == ["C-2"]
        assert out["stats"]["total"] == 1

    def test_custom_without_end(self, snapshot_file, capsys):
        assert main(["revenue", str(snapshot_file), "--period", "custom", "--start", "2026-03-01"]) == 2
        assert "start and end" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main(["orders", str(tmp_path / "nope.json")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert main(["orders", str(path)]) == 1
        assert "Invalid snapshot" in capsys.readouterr().err

    def test_non_finite_price_rejected(self, tmp_path, sample_snapshot_json, capsys):
        sample_snapshot_json["orders"][0]["items"][0]["price"] = "NaN"
        path = tmp_path / "nan.json"
        path.write_text(json.dumps(sample_snapshot_json), encoding="utf-8")
        assert main(["revenue", str(path), *WINDOW]) == 1
        assert "Invalid amount" in capsys.readouterr().err

    def test_no_command(self, capsys):
        assert main([]) == 0
        assert "analytics-cli" in capsys.readouterr().out
