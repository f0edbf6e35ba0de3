"""Shared fixtures for logtally tests."""

import pytest


EXAMPLE_LINES = [
    '127.0.0.1 - - [10/Oct/2023:13:55:36 -0700] "GET /index.html HTTP/1.1" 200 2326',
    '10.0.0.5 - - [10/Oct/2023:13:56:00 -0700] "GET /index.html HTTP/1.1" 404 -',
]


@pytest.fixture
def example_lines():
    return list(EXAMPLE_LINES)


@pytest.fixture
def write_log(tmp_path):
    """Write lines to a log file under tmp_path and return its path as str."""

    def _write(lines, name="access.log"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def output_root(tmp_path):
    return tmp_path / "log_analysis_output"
