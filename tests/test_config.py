"""Tests for logtally.config"""

import pytest

from logtally.categories import TOP_IPS, TOP_URLS
from logtally.config import PipelineConfig, ViewerConfig, split_probe_names


class TestPipelineConfig:
    @pytest.mark.parametrize("kwargs", [{"top_n": 0}, {"top_n": -1}, {"chunk_size": 0}])
    def test_rejects_non_positive_sizes(self, kwargs):
        with pytest.raises(ValueError):
            PipelineConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOGTALLY_TOP_N", "5")
        monkeypatch.setenv("LOGTALLY_CHUNK_SIZE", "100")
        assert PipelineConfig.from_env() == PipelineConfig(top_n=5, chunk_size=100)

    def test_from_env_bad_value(self, monkeypatch):
        monkeypatch.setenv("LOGTALLY_TOP_N", "abc")
        with pytest.raises(ValueError, match="LOGTALLY_TOP_N"):
            PipelineConfig.from_env()


class TestProbeNames:
    def test_split_shared_and_per_category(self):
        shared, per_category = split_probe_names(
            ["a.json", " top_urls = part-1.json ", "", "top_urls=part-2.json", "top_ips=part-3.json"]
        )
        assert shared == ("a.json",)
        assert per_category == {TOP_URLS: ("part-1.json", "part-2.json"), TOP_IPS: ("part-3.json",)}

    @pytest.mark.parametrize("entry", ["top_agents=part-1.json", "top_urls="])
    def test_bad_entries(self, entry):
        with pytest.raises(ValueError):
            split_probe_names([entry])

    def test_viewer_from_env(self, monkeypatch):
        monkeypatch.setenv("LOGTALLY_PROBE_NAMES", "shared.json,top_urls=part-00000-ce9e-c000.json")
        config = ViewerConfig.from_env("http://viewer.test/")
        assert config.base_path == "http://viewer.test/"
        assert config.probe_names == ("shared.json",)
        assert config.category_probe_names == {TOP_URLS: ("part-00000-ce9e-c000.json",)}
