"""
Tests for webfetch_mcp.config: defaults, YAML loading, env overrides, models.
"""
import pytest

from webfetch_mcp.config import (
    Config,
    ExtractedArticle,
    ExtractionResult,
    ExtractionStage,
    FetchedPage,
    SearchParams,
    get_config,
    load_config,
    reset_settings,
    set_config,
)


@pytest.fixture
def fresh_env(monkeypatch, tmp_path):
    """Clean environment with settings and config re-read on next access."""
    for name in ("SEARXNG_BASE", "DEBUG", "DETAILED_LOG", "WEBFETCH_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    set_config(None)
    yield monkeypatch
    reset_settings()


class TestConfigDefaults:
    def test_admission_defaults(self):
        config = Config()
        assert config.admission.sustained_window_seconds == 300
        assert config.admission.max_calls_per_window == 12
        assert config.admission.burst_window_seconds == 30
        assert config.admission.burst_limit == 8

    def test_pacing_and_scraping_defaults(self):
        config = Config()
        assert config.pacing.min_interval_seconds == 1.0
        assert config.scraping.retry_statuses == [429, 502, 503, 504]
        assert config.scraping.max_attempts == 2
        assert (config.scraping.humanize_delay_min, config.scraping.humanize_delay_max) == (0.5, 1.5)
        assert (config.scraping.retry_wait_min, config.scraping.retry_wait_max) == (2.0, 5.0)

    def test_search_defaults(self):
        config = Config()
        assert config.search.base_url == "http://localhost:8080"
        assert config.search.default_limit == 5
        assert config.search.max_limit == 20

    def test_extraction_defaults(self):
        config = Config()
        assert config.extraction.default_max_chars == 20000
        assert config.extraction.min_max_chars == 1000
        assert config.extraction.max_max_chars == 100000


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "absent.yaml"))
        assert config == Config()

    def test_partial_yaml_keeps_other_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "admission:\n"
            "  burst_limit: 4\n"
            "search:\n"
            "  base_url: http://searx.internal:8888\n"
        )
        config = load_config(str(path))
        assert config.admission.burst_limit == 4
        assert config.admission.max_calls_per_window == 12
        assert config.search.base_url == "http://searx.internal:8888"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path)) == Config()


class TestEnvOverrides:
    def test_defaults_without_env(self, fresh_env):
        config = get_config()
        assert config.search.base_url == "http://localhost:8080"
        assert config.logging.debug is False
        assert config.logging.detailed is True

    def test_searxng_base(self, fresh_env):
        fresh_env.setenv("SEARXNG_BASE", "http://localhost:8888")
        assert get_config().search.base_url == "http://localhost:8888"

    def test_debug_raises_console_level(self, fresh_env):
        fresh_env.setenv("DEBUG", "true")
        config = get_config()
        assert config.logging.debug is True
        assert config.logging.level == "DEBUG"

    def test_detailed_log_can_be_disabled(self, fresh_env):
        fresh_env.setenv("DETAILED_LOG", "false")
        assert get_config().logging.detailed is False

    def test_env_wins_over_yaml(self, fresh_env, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("search:\n  base_url: http://from-yaml:8080\n")
        fresh_env.setenv("WEBFETCH_CONFIG", str(path))
        fresh_env.setenv("SEARXNG_BASE", "http://from-env:8080")
        assert get_config().search.base_url == "http://from-env:8080"

    def test_yaml_path_from_env(self, fresh_env, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("pacing:\n  min_interval_seconds: 2.5\n")
        fresh_env.setenv("WEBFETCH_CONFIG", str(path))
        assert get_config().pacing.min_interval_seconds == 2.5


class TestModels:
    def test_effective_query(self):
        assert SearchParams(query="weather").effective_query == "weather"
        assert SearchParams(query="weather", site="weather.gov").effective_query == "weather site:weather.gov"

    def test_fetched_page_ok(self):
        assert FetchedPage(url="https://x.example/", status_code=200).ok
        assert not FetchedPage(url="https://x.example/", status_code=503).ok

    def test_extraction_result_succeeded(self):
        article = ExtractedArticle(title="T", body="B")
        assert ExtractionResult(stage=ExtractionStage.PARAGRAPHS, article=article).succeeded
        assert not ExtractionResult(stage=ExtractionStage.FAILED).succeeded

    def test_stage_values(self):
        assert [s.value for s in ExtractionStage] == ["readability", "content_region", "paragraphs", "failed"]
