"""Tests for request option resolution."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from glrequester.shared.options import base_options_handler, default_options_handler, format_query
from glrequester.types import ResourceOptions


@pytest.fixture
def resource() -> ResourceOptions:
    return ResourceOptions(url="testurl", headers={"test": "5"}, reject_unauthorized=True)


class TestFormatQuery:
    def test_empty(self):
        assert format_query(None) == ""
        assert format_query({}) == ""

    def test_string_passes_through(self):
        assert format_query("test=4") == "test=4"

    def test_scalars_and_booleans(self):
        assert format_query({"page": 2, "simple": True, "owned": False}) == (
            "page=2&simple=true&owned=false"
        )

    def test_lists_use_brackets(self):
        assert format_query({"labels": ["a", "b"]}) == "labels%5B%5D=a&labels%5B%5D=b"

    def test_nested_mappings(self):
        assert format_query({"custom_attributes": {"key": "v"}}) == "custom_attributes%5Bkey%5D=v"

    def test_none_values_are_dropped(self):
        assert format_query({"search": None, "page": 1}) == "page=1"


class TestBaseOptionsHandler:
    def test_defaults(self, resource):
        options = base_options_handler(resource)

        assert options.method == "GET"
        assert options.prefix_url == "testurl"
        assert options.headers == {"test": "5"}
        assert options.body is None
        assert options.search_params is None
        assert options.as_stream is False
        assert options.verify is None

    def test_method_is_upper_cased(self, resource):
        assert base_options_handler(resource, {"method": "post"}).method == "POST"

    def test_request_headers_override_resource_headers(self, resource):
        options = base_options_handler(resource, {"headers": {"test": "6", "other": "1"}})

        assert options.headers == {"test": "6", "other": "1"}

    def test_header_override_ignores_case(self):
        resource = ResourceOptions(
            url="https://test.com",
            headers={"PRIVATE-TOKEN": "old", "Content-Type": "text/plain"},
        )

        options = base_options_handler(
            resource, {"headers": {"private-token": "new"}, "body": {"a": 1}}
        )

        assert options.headers == {"private-token": "new", "content-type": "application/json"}

    def test_auth_header_replaces_caller_header_of_any_case(self):
        resource = ResourceOptions.from_token("https://test.com", token="abc")

        options = base_options_handler(resource, {"headers": {"PRIVATE-TOKEN": "stale"}})

        assert options.headers == {"private-token": "abc"}

    def test_inputs_are_not_mutated(self, resource):
        request_options = {"headers": {"x": "1"}, "body": {"a": 1}}

        base_options_handler(resource, request_options)

        assert resource.headers == {"test": "5"}
        assert request_options == {"headers": {"x": "1"}, "body": {"a": 1}}

    def test_mapping_body_is_json_encoded(self, resource):
        options = base_options_handler(resource, {"body": {"name": "project"}})

        assert json.loads(options.body) == {"name": "project"}
        assert options.headers["content-type"] == "application/json"

    def test_bytes_body_passes_through(self, resource):
        options = base_options_handler(resource, {"body": b"raw"})

        assert options.body == b"raw"
        assert "content-type" not in options.headers

    def test_sudo_header(self, resource):
        assert base_options_handler(resource, {"sudo": 42}).headers["sudo"] == "42"

    def test_search_params_are_formatted(self, resource):
        options = base_options_handler(resource, {"search_params": {"page": 1}})

        assert options.search_params == "page=1"

    def test_private_token(self):
        resource = ResourceOptions.from_token("https://gitlab.com/api/v4", token="abc")

        assert base_options_handler(resource).headers == {"private-token": "abc"}

    def test_oauth_token(self):
        resource = ResourceOptions.from_token("https://gitlab.com/api/v4", oauth_token="abc")

        assert base_options_handler(resource).headers == {"authorization": "Bearer abc"}

    def test_job_token(self):
        resource = ResourceOptions.from_token("https://gitlab.com/api/v4", job_token="abc")

        assert base_options_handler(resource).headers == {"job-token": "abc"}

    def test_dynamic_token_is_resolved_per_call(self):
        tokens = iter(["first", "second"])
        resource = ResourceOptions.from_token(
            "https://gitlab.com/api/v4", oauth_token=lambda: next(tokens)
        )

        assert base_options_handler(resource).headers["authorization"] == "Bearer first"
        assert base_options_handler(resource).headers["authorization"] == "Bearer second"

    def test_timeout_falls_back_to_resource(self):
        resource = ResourceOptions(url="https://test.com", query_timeout=30)

        assert base_options_handler(resource).timeout == 30
        assert base_options_handler(resource, {"timeout": 5}).timeout == 5

    def test_as_stream(self, resource):
        assert base_options_handler(resource, {"as_stream": True}).as_stream is True


class TestDefaultOptionsHandler:
    def test_https_and_reject_unauthorized_true(self, resource):
        resource = resource.model_copy(update={"url": "https://test.com"})

        options = default_options_handler(resource, {"method": "post"})

        assert options.verify is None

    def test_http_and_reject_unauthorized_false(self, resource):
        resource = resource.model_copy(update={"url": "http://test.com", "reject_unauthorized": False})

        options = default_options_handler(resource, {"method": "post"})

        assert options.verify is None

    def test_https_and_reject_unauthorized_false(self, resource):
        resource = resource.model_copy(
            update={"url": "https://test.com", "reject_unauthorized": False}
        )

        options = default_options_handler(resource, {"method": "post"})

        assert options.verify is False

    def test_https_and_reject_unauthorized_unset(self):
        resource = ResourceOptions(url="https://test.com")

        assert default_options_handler(resource).verify is None

    def test_without_custom_agent_support_is_silent(self):
        resource = ResourceOptions(url="https://test.com", reject_unauthorized=False)

        options = default_options_handler(resource, supports_custom_agents=False)

        assert options.verify is None

    def test_capability_defaults_to_settings(self):
        resource = ResourceOptions(url="https://test.com", reject_unauthorized=False)

        with patch("glrequester.shared.options.settings") as mock_settings:
            mock_settings.supports_custom_agents = False
            options = default_options_handler(resource)

        assert options.verify is None

    def test_keeps_base_options(self):
        resource = ResourceOptions.from_token(
            "https://test.com/api/v4", token="abc", reject_unauthorized=False
        )

        options = default_options_handler(resource, {"method": "put", "body": {"a": 1}})

        assert options.method == "PUT"
        assert options.prefix_url == "https://test.com/api/v4"
        assert options.headers["private-token"] == "abc"
        assert options.verify is False
