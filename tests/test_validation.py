"""
Tests for wordpress_mcp.tools.validation - argument checking and coercion.
"""

import pytest

from wordpress_mcp.errors import ValidationFailed
from wordpress_mcp.tools.validation import validate_arguments


@pytest.fixture
def posts_schema(config):
    return config.get_tool_by_name("get_posts").input_schema


@pytest.fixture
def update_schema(config):
    return config.get_tool_by_name("update_post").input_schema


class TestRequired:
    def test_missing_required_field(self, config):
        with pytest.raises(ValidationFailed, match="Missing required argument: title"):
            validate_arguments(config.get_tool_by_name("create_post").input_schema, {})

    def test_null_required_field(self, update_schema):
        with pytest.raises(ValidationFailed, match="Missing required argument: id"):
            validate_arguments(update_schema, {"id": None, "title": "x"})

    def test_none_arguments_mean_empty(self, posts_schema):
        assert validate_arguments(posts_schema, None) == {}

    def test_non_object_arguments(self, posts_schema):
        with pytest.raises(ValidationFailed, match="must be an object"):
            validate_arguments(posts_schema, ["per_page", 5])


class TestCoercion:
    def test_integer_strings_and_floats(self, update_schema):
        args = validate_arguments(update_schema, {"id": "42", "featured_media": 7.0})
        assert args == {"id": 42, "featured_media": 7}

    def test_integer_rejects_text_and_bool(self, update_schema):
        with pytest.raises(ValidationFailed, match="'id' must be an integer"):
            validate_arguments(update_schema, {"id": "forty-two"})
        with pytest.raises(ValidationFailed, match="'id' must be an integer"):
            validate_arguments(update_schema, {"id": True})

    @pytest.mark.parametrize("value", ["--5", "²", "4.5", ""])
    def test_integer_rejects_malformed_digit_strings(self, update_schema, value):
        with pytest.raises(ValidationFailed, match="'id' must be an integer"):
            validate_arguments(update_schema, {"id": value})

    def test_id_lists(self, update_schema):
        args = validate_arguments(update_schema, {"id": 1, "tags": ["3", 4], "categories": "1, 2"})
        assert args["tags"] == [3, 4]
        assert args["categories"] == [1, 2]

    def test_id_list_with_bad_item(self, update_schema):
        with pytest.raises(ValidationFailed, match=r"'tags\[1\]' must be an integer"):
            validate_arguments(update_schema, {"id": 1, "tags": [3, "x"]})

    def test_boolean_strings(self, config):
        schema = config.get_tool_by_name("delete_post").input_schema
        assert validate_arguments(schema, {"id": 3, "force": "true"})["force"] is True
        assert validate_arguments(schema, {"id": 3, "force": False})["force"] is False
        with pytest.raises(ValidationFailed, match="'force' must be a boolean"):
            validate_arguments(schema, {"id": 3, "force": "maybe"})

    def test_string_type(self, posts_schema):
        with pytest.raises(ValidationFailed, match="'search' must be a string"):
            validate_arguments(posts_schema, {"search": 12})

    def test_enum(self, posts_schema):
        with pytest.raises(ValidationFailed, match="'status' must be one of: publish, draft, pending, private"):
            validate_arguments(posts_schema, {"status": "trash"})

    def test_unknown_and_null_fields_dropped(self, posts_schema):
        args = validate_arguments(posts_schema, {"search": "news", "colour": "red", "order": None})
        assert args == {"search": "news"}


class TestBounds:
    def test_page_size_above_maximum_is_clamped(self, posts_schema):
        assert validate_arguments(posts_schema, {"per_page": 500})["per_page"] == 100

    @pytest.mark.parametrize("value", [0, -5])
    def test_page_size_below_minimum_takes_default(self, posts_schema, value):
        assert validate_arguments(posts_schema, {"per_page": value})["per_page"] == 10

    def test_page_below_minimum_takes_default(self, posts_schema):
        assert validate_arguments(posts_schema, {"page": 0})["page"] == 1

    def test_id_below_minimum_rejected(self, update_schema):
        with pytest.raises(ValidationFailed, match="'id' must be at least 1"):
            validate_arguments(update_schema, {"id": 0})
