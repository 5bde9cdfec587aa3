"""Unit tests for endpoint descriptors and path resolution."""

import re

import pytest

from gitlab3.endpoints import (
    ENDPOINTS,
    VERBS,
    Endpoint,
    get_endpoint,
    placeholders,
    resolve_path,
)
from gitlab3.errors import ContractError


class TestResolvePath:
    def test_substitutes_placeholders(self):
        path = resolve_path(
            "/projects/:project_id/issues/:issue_id",
            {"project_id": 42, "issue_id": 7},
        )
        assert path == "/projects/42/issues/7"

    def test_namespaced_id_is_one_segment(self):
        assert resolve_path("/projects/:project_id", {"project_id": "group/project"}) == (
            "/projects/group%2Fproject"
        )

    def test_special_characters_encoded(self):
        path = resolve_path("/projects/search/:query", {"query": "a b?c#d"})
        assert path == "/projects/search/a%20b%3Fc%23d"

    def test_missing_argument(self):
        with pytest.raises(ContractError, match="issue_id"):
            resolve_path("/projects/:project_id/issues/:issue_id", {"project_id": 1})

    def test_none_argument_counts_as_missing(self):
        with pytest.raises(ContractError):
            resolve_path("/users/:user_id", {"user_id": None})

    def test_unknown_argument(self):
        with pytest.raises(ContractError, match="extra"):
            resolve_path("/users/:user_id", {"user_id": 1, "extra": 2})

    def test_no_placeholders(self):
        assert resolve_path("/projects") == "/projects"

    def test_placeholders_in_order(self):
        assert placeholders("/groups/:group_id/members/:user_id") == ("group_id", "user_id")


class TestEndpointTable:
    """Properties that hold for every declared endpoint."""

    @pytest.mark.parametrize("endpoint", list(ENDPOINTS.values()), ids=lambda e: e.name)
    def test_resolved_path_has_no_placeholders(self, endpoint):
        args = {name: f"v {name}/x" for name in endpoint.placeholders}

        path = resolve_path(endpoint.path, args)

        assert not re.search(r":[A-Za-z_]", path)
        assert path.count("%2F") == len(endpoint.placeholders)
        assert path.count("%20") == len(endpoint.placeholders)

    def test_table_size(self):
        assert len(ENDPOINTS) >= 100

    def test_verbs_valid(self):
        assert {endpoint.verb for endpoint in ENDPOINTS.values()} <= set(VERBS)

    def test_paginated_endpoints_are_gets_with_params(self):
        for endpoint in ENDPOINTS.values():
            if endpoint.paginated:
                assert endpoint.verb == "GET"
                assert endpoint.accepts_params

    def test_names_match_keys(self):
        assert all(name == endpoint.name for name, endpoint in ENDPOINTS.items())

    def test_raw_endpoints_declare_content_type(self):
        assert ENDPOINTS["get_raw_blob"].content_type == "text"
        assert ENDPOINTS["get_archive"].content_type == "binary"


class TestEndpointDescriptor:
    def test_frozen(self):
        endpoint = get_endpoint("get_issue")
        with pytest.raises(AttributeError):
            endpoint.path = "/elsewhere"

    def test_invalid_verb(self):
        with pytest.raises(ContractError):
            Endpoint("patch_issue", "PATCH", "/issues/:issue_id")

    def test_invalid_content_type(self):
        with pytest.raises(ContractError):
            Endpoint("get_xml", "GET", "/x", content_type="xml")

    def test_paginated_requires_params(self):
        with pytest.raises(ContractError):
            Endpoint("list_x", "GET", "/x", paginated=True)

    def test_unknown_endpoint(self):
        with pytest.raises(ContractError):
            get_endpoint("list_pipelines")
