"""End-to-end tests for logtally.cli"""

import json

import pytest

from logtally.categories import CATEGORIES, STATUS_COUNTS, TOP_IPS, TOP_URLS
from logtally.cli import analyze_main, view_main


def _category_rows(root, category):
    rows = []
    for shard in sorted((root / category).glob("part-*.json")):
        rows.extend(json.loads(line) for line in shard.read_text(encoding="utf-8").splitlines())
    return rows


class TestAnalyze:
    @pytest.mark.parametrize("argv", [[], ["only-input.log"]])
    def test_usage_error(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            analyze_main(argv)
        assert excinfo.value.code != 0
        assert "usage" in capsys.readouterr().err.lower()

    def test_example_end_to_end(self, write_log, example_lines, output_root):
        log = write_log(example_lines + ["not a log line"])
        assert analyze_main([log, str(output_root)]) == 0

        assert _category_rows(output_root, STATUS_COUNTS) == [
            {"statusCode": 200, "count": 1},
            {"statusCode": 404, "count": 1},
        ]
        assert _category_rows(output_root, TOP_URLS) == [{"url": "/index.html", "count": 2}]
        assert _category_rows(output_root, TOP_IPS) == [
            {"ipAddress": "10.0.0.5", "count": 1},
            {"ipAddress": "127.0.0.1", "count": 1},
        ]

    def test_rerun_gives_same_content(self, write_log, output_root):
        lines = [
            f'10.0.{i % 3}.{i % 11} - - [10/Oct/2023:13:55:{i % 60:02d} -0700] "GET /p{i % 13} HTTP/1.1" {200 + (i % 4) * 100} {i}'
            for i in range(300)
        ]
        log = write_log(lines)
        assert analyze_main([log, str(output_root)]) == 0
        first = {c: _category_rows(output_root, c) for c in CATEGORIES}
        assert analyze_main([log, str(output_root), "--chunk-size", "7"]) == 0
        second = {c: _category_rows(output_root, c) for c in CATEGORIES}
        assert first == second
        assert sum(r["count"] for r in first[STATUS_COUNTS]) == 300
        assert len(first[TOP_URLS]) == 10
        assert len(first[TOP_IPS]) == 10

    def test_missing_input_fails(self, tmp_path, output_root):
        assert analyze_main([str(tmp_path / "missing.log"), str(output_root)]) == 1
        assert not output_root.exists()

    def test_unsupported_output_scheme(self, write_log, example_lines):
        assert analyze_main([write_log(example_lines), "hdfs://namenode/out"]) == 1

    def test_bad_environment_value_is_reported(self, write_log, example_lines, output_root, monkeypatch, caplog):
        monkeypatch.setenv("LOGTALLY_TOP_N", "abc")
        assert analyze_main([write_log(example_lines), str(output_root)]) == 1
        assert "LOGTALLY_TOP_N" in caplog.text
        assert not output_root.exists()

    def test_flag_overrides_environment(self, write_log, example_lines, output_root, monkeypatch):
        monkeypatch.setenv("LOGTALLY_TOP_N", "1")
        log = write_log(example_lines)
        assert analyze_main([log, str(output_root)]) == 0
        assert len(_category_rows(output_root, TOP_IPS)) == 1
        assert analyze_main([log, str(output_root), "--top-n", "2"]) == 0
        assert len(_category_rows(output_root, TOP_IPS)) == 2

    @pytest.mark.parametrize("flag", [["--top-n", "0"], ["--top-n", "-2"], ["--chunk-size", "0"]])
    def test_non_positive_sizes_are_rejected(self, flag, write_log, example_lines, output_root):
        assert analyze_main([write_log(example_lines), str(output_root), *flag]) == 1
        assert not output_root.exists()


class TestView:
    def test_prints_summary(self, write_log, example_lines, output_root, capsys):
        analyze_main([write_log(example_lines), str(output_root)])
        capsys.readouterr()

        assert view_main([str(output_root)]) == 0
        out = capsys.readouterr().out
        assert "== top_urls ==" in out
        assert "/index.html" in out
        assert "Missing" not in out

    def test_partial_results_are_noted(self, write_log, example_lines, output_root, capsys):
        analyze_main([write_log(example_lines), str(output_root)])
        for category in (TOP_URLS, TOP_IPS):
            for shard in (output_root / category).iterdir():
                shard.unlink()
        capsys.readouterr()

        assert view_main([str(output_root)]) == 0
        out = capsys.readouterr().out
        assert "(unavailable)" in out
        assert "Missing: top_urls, top_ips" in out

    def test_no_data_exits_non_zero(self, tmp_path, capsys):
        assert view_main([str(tmp_path)]) == 1
        assert "Check that" in capsys.readouterr().err

    def test_summary_numbers(self, write_log, example_lines, output_root, capsys):
        analyze_main([write_log(example_lines), str(output_root)])
        capsys.readouterr()

        assert view_main([str(output_root)]) == 0
        out = capsys.readouterr().out
        assert "Total requests: 2" in out
        assert "Error rate (4xx/5xx): 50.00%" in out
        assert "URLs listed: 1" in out
        assert "Client addresses listed: 2" in out
        status_lines = [line for line in out.splitlines() if line.strip().startswith(("200", "404"))]
        assert status_lines[0].split() == ["200", "1", "50.00%", "OK", "-", "Success"]
        assert status_lines[1].split() == ["404", "1", "50.00%", "Not", "Found"]
        url_line = next(line for line in out.splitlines() if "/index.html" in line)
        assert url_line.split() == ["/index.html", "2", "100.00%"]

    def test_unknown_category_in_shard_name(self, output_root, caplog):
        assert view_main([str(output_root), "--probe-name", "top_agents=part-00000.json"]) == 1
        assert "top_agents" in caplog.text
