"""
Tests for configuration loading, connection settings and toolset selection.
"""

import base64

import pytest

from wordpress_mcp.capabilities import filter_tools_by_toolset, get_capability_summary
from wordpress_mcp.config import Config, ConnectionSettings, TOOLSETS
from wordpress_mcp.errors import ConfigurationError
from wordpress_mcp.tools import ToolGenerator


EXPECTED_TOOLS = {
    "core": {"get_posts", "get_post", "create_post", "update_post", "delete_post",
             "publish_post", "get_categories", "get_tags", "get_site_info"},
    "pages": {"get_pages", "get_page", "create_page", "update_page", "delete_page",
              "publish_page"},
    "media": {"list_media", "get_media", "upload_media", "delete_media"},
    "search": {"search_site"},
}


class TestCatalogue:
    def test_every_toolset_is_loaded(self, config):
        by_toolset = {}
        for tool in config.get_all_tools():
            by_toolset.setdefault(tool.toolset, set()).add(tool.name)
        assert by_toolset == EXPECTED_TOOLS

    def test_tool_names_are_unique(self, config):
        names = [tool.name for tool in config.get_all_tools()]
        assert len(names) == len(set(names))

    def test_descriptors_name_an_adapter_method(self, config, adapter):
        for tool in config.get_all_tools():
            assert callable(getattr(adapter, tool.method, None)), tool.name

    def test_status_enum_and_id_lists(self, config):
        schema = config.get_tool_by_name("get_posts").input_schema
        assert schema["properties"]["status"]["enum"] == ["publish", "draft", "pending", "private"]
        assert schema["properties"]["categories"] == {
            "type": "array", "items": {"type": "integer"},
            "description": "Only posts in these category IDs",
        }
        assert schema["properties"]["per_page"]["maximum"] == 100

    def test_required_fields(self, config):
        assert config.get_tool_by_name("create_post").input_schema["required"] == ["title"]
        assert config.get_tool_by_name("upload_media").input_schema["required"] == ["filename", "data"]
        assert config.get_tool_by_name("search_site").input_schema["required"] == ["search"]
        assert "required" not in config.get_tool_by_name("get_site_info").input_schema

    def test_missing_catalogue_gives_empty_config(self, tmp_path):
        config = Config(tmp_path)
        assert config.get_all_tools() == []

    def test_duplicate_names_rejected(self, tmp_path):
        (tmp_path / "tools.yaml").write_text(
            "tools:\n"
            "  - {name: a, description: x, wordpress_call: {method: get_posts}}\n"
            "  - {name: a, description: y, wordpress_call: {method: get_tags}}\n"
        )
        with pytest.raises(ValueError, match="Duplicate tool name"):
            Config(tmp_path)

    def test_testing_flag(self, tmp_path):
        (tmp_path / "tools.yaml").write_text("testing: true\ntools: []\n")
        assert Config(tmp_path).testing_mode is True


class TestConnectionSettings:
    def test_derived_values(self, settings):
        assert settings.base_url == "https://blog.example.com/wp-json/wp/v2"
        assert settings.api_root == "https://blog.example.com/wp-json/"
        expected = base64.b64encode(b"editor:abcd efgh ijkl").decode()
        assert settings.authorization == f"Basic {expected}"

    def test_trailing_slash_and_subdirectory(self):
        settings = ConnectionSettings.create("https://example.com/blog/", "u", "p")
        assert settings.base_url == "https://example.com/blog/wp-json/wp/v2"

    @pytest.mark.parametrize("username,password", [("", "secret"), ("user", ""), ("user", "   "), (None, "x")])
    def test_empty_credentials_fail(self, username, password):
        with pytest.raises(ConfigurationError, match="Invalid WordPress connection settings"):
            ConnectionSettings.create("https://example.com", username, password)

    def test_invalid_url_fails(self):
        with pytest.raises(ConfigurationError):
            ConnectionSettings.create("not a url", "user", "secret")

    def test_settings_are_frozen(self, settings):
        with pytest.raises(Exception):
            settings.username = "someone-else"


class TestEnvironment:
    def test_missing_variables_reported_together(self, monkeypatch, config):
        for name in ("WORDPRESS_URL", "WORDPRESS_USERNAME", "WORDPRESS_PASSWORD"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ConfigurationError) as exc:
            config.get_connection_settings()
        assert "WORDPRESS_URL" in str(exc.value)
        assert "WORDPRESS_PASSWORD" in str(exc.value)

    def test_connection_settings_from_env(self, wordpress_env, monkeypatch, config):
        monkeypatch.setenv("WORDPRESS_TIMEOUT", "12.5")
        settings = config.get_connection_settings()
        assert settings.site_root == "https://blog.example.com"
        assert settings.timeout == 12.5

    def test_defaults(self, wordpress_env, config):
        assert config.get_request_timeout() == 30.0
        assert config.get_max_workers() == 10
        assert config.get_enabled_toolsets() == TOOLSETS

    def test_bad_numbers(self, monkeypatch, config):
        monkeypatch.setenv("WORDPRESS_MAX_WORKERS", "many")
        with pytest.raises(ConfigurationError):
            config.get_max_workers()

    def test_toolsets_keep_core(self, monkeypatch, config):
        monkeypatch.setenv("WORDPRESS_TOOLSETS", "media")
        assert config.get_enabled_toolsets() == ["core", "media"]

    def test_unknown_toolset(self, monkeypatch, config):
        monkeypatch.setenv("WORDPRESS_TOOLSETS", "core,comments")
        with pytest.raises(ConfigurationError, match="comments"):
            config.get_enabled_toolsets()


class TestToolsetFiltering:
    def test_core_only_variant(self, config):
        enabled = filter_tools_by_toolset(config.get_all_tools(), ["core"])
        assert set(enabled) == EXPECTED_TOOLS["core"]

        tools = ToolGenerator(config.get_all_tools(), enabled_tools=enabled).generate_tools()
        assert {tool["name"] for tool in tools} == EXPECTED_TOOLS["core"]

    def test_generator_keeps_catalogue_order(self, config):
        tools = ToolGenerator(config.get_all_tools()).generate_tools()
        assert [tool["name"] for tool in tools] == [t.name for t in config.get_all_tools()]
        assert set(tools[0]) == {"name", "description", "inputSchema"}

    def test_capability_summary(self, config):
        enabled = filter_tools_by_toolset(config.get_all_tools(), ["core", "search"])
        summary = get_capability_summary(config.get_all_tools(), enabled)
        assert summary["enabled_toolsets"] == ["core", "search"]
        assert summary["disabled_toolsets"] == ["media", "pages"]
        assert summary["tool_count"] == 10
