"""Tests for logtally.viewer.summary"""

from logtally.viewer.loader import CategoryResult, LoadResult
from logtally.viewer.normalize import CanonicalRow
from logtally.viewer.summary import format_stats, status_description, summary_stats, with_shares


def _result(**rows):
    result = LoadResult()
    for category, category_rows in rows.items():
        result.categories[category] = CategoryResult(category, category_rows, ["part-00000.json"])
    return result


class TestSummaryStats:
    def test_totals_and_error_rate(self):
        result = _result(
            status_counts=[CanonicalRow("200", 6), CanonicalRow("404", 2), CanonicalRow("503", 1)],
            top_urls=[CanonicalRow("/a", 5), CanonicalRow("/b", 4)],
            top_ips=[CanonicalRow("10.0.0.1", 9)],
        )
        stats = summary_stats(result)
        assert stats["total_requests"] == 9
        assert stats["4xx_count"] == 2
        assert stats["5xx_count"] == 1
        assert stats["error_rate"] == 33.33
        assert stats["urls_listed"] == 2
        assert stats["ips_listed"] == 1

    def test_missing_status_counts(self):
        stats = summary_stats(_result(top_urls=[CanonicalRow("/a", 1)]))
        assert stats["total_requests"] is None
        assert stats["error_rate"] is None
        assert stats["ips_listed"] is None
        assert format_stats(stats)[1] == "Error rate (4xx/5xx): n/a"

    def test_no_requests_has_zero_rate(self):
        stats = summary_stats(_result(status_counts=[]))
        assert stats["total_requests"] == 0
        assert stats["error_rate"] == 0.0


def test_row_shares_are_of_the_category_total():
    shares = with_shares([CanonicalRow("/a", 2), CanonicalRow("/b", 1)])
    assert [share for _, share in shares] == [66.67, 33.33]


def test_status_description():
    assert status_description("302") == "Found (Temporary Redirect)"
    assert status_description("200") == "OK - Success"
    assert status_description("418") == "Unknown Status"
