"""Endpoint descriptors for the GitLab v3 REST API.

Every public client method is backed by one `Endpoint` from `ENDPOINTS`.
A descriptor only records what the wire needs (verb, path template,
whether params are accepted, how the body is decoded); all request
plumbing lives in the mediator.

Path templates use `:name` placeholders, e.g.
`/projects/:project_id/issues/:issue_id`.

Reference: https://github.com/gitlabhq/gitlabhq/tree/7-14-stable/doc/api
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from .errors import ContractError

__all__ = [
    "CONTENT_TYPES",
    "ENDPOINTS",
    "VERBS",
    "Endpoint",
    "get_endpoint",
    "placeholders",
    "resolve_path",
]

VERBS = ("GET", "POST", "PUT", "DELETE")
CONTENT_TYPES = ("json", "text", "binary")

_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def placeholders(template: str) -> tuple[str, ...]:
    """Return placeholder names of a path template in order of appearance."""
    return tuple(_PLACEHOLDER.findall(template))


def resolve_path(template: str, path_args: Mapping[str, Any] | None = None) -> str:
    """Substitute `:name` placeholders with percent-encoded values.

    Each value is converted with `str()` and quoted with no safe characters,
    so a namespaced project id such as `group/project` becomes
    `group%2Fproject` and stays a single path segment.

    Args:
        template: Path template, e.g. `/projects/:project_id/issues`
        path_args: One value per placeholder

    Returns:
        Resolved path with no remaining placeholders.

    Raises:
        ContractError: If a placeholder has no value (or a None value), or
            path_args names a key the template does not use.

    Example:
        >>> resolve_path("/projects/:project_id", {"project_id": "a/b"})
        '/projects/a%2Fb'
    """
    path_args = dict(path_args or {})
    names = placeholders(template)

    missing = [name for name in names if path_args.get(name) is None]
    if missing:
        raise ContractError(
            f"Missing path argument(s) {', '.join(missing)} for {template}"
        )
    unknown = sorted(set(path_args) - set(names))
    if unknown:
        raise ContractError(
            f"Unknown path argument(s) {', '.join(unknown)} for {template}"
        )

    return _PLACEHOLDER.sub(
        lambda match: quote(str(path_args[match.group(1)]), safe=""), template
    )


@dataclass(frozen=True)
class Endpoint:
    """Static declaration of one REST operation.

    Attributes:
        name: Client method name
        verb: HTTP verb (GET, POST, PUT, DELETE)
        path: Path template with `:name` placeholders
        accepts_params: Whether the caller may pass request params
        returns_value: Whether the decoded body is handed back to the caller
        content_type: How a 2xx body is decoded (json, text, binary)
        paginated: Whether the endpoint honours page/per_page
    """

    name: str
    verb: str
    path: str
    accepts_params: bool = False
    returns_value: bool = True
    content_type: str = "json"
    paginated: bool = False

    def __post_init__(self) -> None:
        if self.verb not in VERBS:
            raise ContractError(f"Unsupported verb {self.verb!r} for {self.name}")
        if self.content_type not in CONTENT_TYPES:
            raise ContractError(
                f"Unsupported content type {self.content_type!r} for {self.name}"
            )
        if self.paginated and not self.accepts_params:
            raise ContractError(f"Paginated endpoint {self.name} must accept params")

    @property
    def placeholders(self) -> tuple[str, ...]:
        return placeholders(self.path)


def _get(name: str, path: str, **kwargs: Any) -> Endpoint:
    return Endpoint(name, "GET", path, **kwargs)


def _list(name: str, path: str, **kwargs: Any) -> Endpoint:
    return Endpoint(name, "GET", path, accepts_params=True, paginated=True, **kwargs)


def _post(name: str, path: str, **kwargs: Any) -> Endpoint:
    kwargs.setdefault("accepts_params", True)
    return Endpoint(name, "POST", path, **kwargs)


def _put(name: str, path: str, **kwargs: Any) -> Endpoint:
    kwargs.setdefault("accepts_params", True)
    return Endpoint(name, "PUT", path, **kwargs)


def _delete(name: str, path: str, **kwargs: Any) -> Endpoint:
    return Endpoint(name, "DELETE", path, **kwargs)


_PROJECT = "/projects/:project_id"
_REPO = f"{_PROJECT}/repository"
_MR = f"{_PROJECT}/merge_request/:merge_request_id"

_DECLARATIONS = (
    # --- Session ---
    _post("login", "/session"),
    # --- Users ---
    _list("list_users", "/users"),
    _get("get_user", "/users/:user_id"),
    _post("create_user", "/users"),
    _put("edit_user", "/users/:user_id"),
    _delete("delete_user", "/users/:user_id"),
    _put("block_user", "/users/:user_id/block", accepts_params=False, returns_value=False),
    _put("unblock_user", "/users/:user_id/unblock", accepts_params=False, returns_value=False),
    _get("current_user", "/user"),
    # --- SSH keys ---
    _list("list_ssh_keys", "/user/keys"),
    _get("get_ssh_key", "/user/keys/:key_id"),
    _post("add_ssh_key", "/user/keys"),
    _delete("delete_ssh_key", "/user/keys/:key_id"),
    _list("list_user_ssh_keys", "/users/:user_id/keys"),
    _post("add_user_ssh_key", "/users/:user_id/keys"),
    _delete("delete_user_ssh_key", "/users/:user_id/keys/:key_id"),
    # --- Projects ---
    _list("list_projects", "/projects"),
    _list("list_owned_projects", "/projects/owned"),
    _list("list_all_projects", "/projects/all"),
    _list("search_projects", "/projects/search/:query"),
    _get("get_project", _PROJECT),
    _list("list_project_events", f"{_PROJECT}/events"),
    _post("create_project", "/projects"),
    _post("create_project_for_user", "/projects/user/:user_id"),
    _delete("delete_project", _PROJECT),
    _post("fork_project", "/projects/fork/:project_id", accepts_params=False),
    _post(
        "create_fork_relation",
        f"{_PROJECT}/fork/:forked_from_id",
        accepts_params=False,
    ),
    _delete("delete_fork_relation", f"{_PROJECT}/fork", returns_value=False),
    # --- Project members ---
    _list("list_project_members", f"{_PROJECT}/members"),
    _get("get_project_member", f"{_PROJECT}/members/:user_id"),
    _post("add_project_member", f"{_PROJECT}/members"),
    _put("edit_project_member", f"{_PROJECT}/members/:user_id"),
    _delete("remove_project_member", f"{_PROJECT}/members/:user_id"),
    # --- Project hooks ---
    _list("list_project_hooks", f"{_PROJECT}/hooks"),
    _get("get_project_hook", f"{_PROJECT}/hooks/:hook_id"),
    _post("add_project_hook", f"{_PROJECT}/hooks"),
    _put("edit_project_hook", f"{_PROJECT}/hooks/:hook_id"),
    _delete("delete_project_hook", f"{_PROJECT}/hooks/:hook_id"),
    # --- Branches ---
    _list("list_branches", f"{_REPO}/branches"),
    _get("get_branch", f"{_REPO}/branches/:branch"),
    _post("create_branch", f"{_REPO}/branches"),
    _delete("delete_branch", f"{_REPO}/branches/:branch"),
    _put("protect_branch", f"{_REPO}/branches/:branch/protect", accepts_params=False),
    _put("unprotect_branch", f"{_REPO}/branches/:branch/unprotect", accepts_params=False),
    # --- Tags ---
    _list("list_tags", f"{_REPO}/tags"),
    _post("create_tag", f"{_REPO}/tags"),
    # --- Repository ---
    _get("list_tree", f"{_REPO}/tree", accepts_params=True),
    _get("get_raw_file", f"{_REPO}/blobs/:sha", accepts_params=True, content_type="text"),
    _get("get_raw_blob", f"{_REPO}/raw_blobs/:sha", content_type="text"),
    _get("get_archive", f"{_REPO}/archive", accepts_params=True, content_type="binary"),
    _get("compare", f"{_REPO}/compare", accepts_params=True),
    _get("list_contributors", f"{_REPO}/contributors"),
    # --- Commits ---
    _list("list_commits", f"{_REPO}/commits"),
    _get("get_commit", f"{_REPO}/commits/:sha"),
    _get("get_commit_diff", f"{_REPO}/commits/:sha/diff"),
    _list("list_commit_comments", f"{_REPO}/commits/:sha/comments"),
    _post("add_commit_comment", f"{_REPO}/commits/:sha/comments"),
    # --- Repository files ---
    _get("get_file", f"{_REPO}/files", accepts_params=True),
    _post("create_file", f"{_REPO}/files"),
    _put("update_file", f"{_REPO}/files"),
    Endpoint("delete_file", "DELETE", f"{_REPO}/files", accepts_params=True),
    # --- Merge requests ---
    _list("list_merge_requests", f"{_PROJECT}/merge_requests"),
    _get("get_merge_request", _MR),
    _get("get_merge_request_changes", f"{_MR}/changes"),
    _post("create_merge_request", f"{_PROJECT}/merge_requests"),
    _put("edit_merge_request", _MR),
    _put("accept_merge_request", f"{_MR}/merge"),
    _list("list_merge_request_comments", f"{_MR}/comments"),
    _post("add_merge_request_comment", f"{_MR}/comments"),
    # --- Issues ---
    _list("list_all_issues", "/issues"),
    _list("list_issues", f"{_PROJECT}/issues"),
    _get("get_issue", f"{_PROJECT}/issues/:issue_id"),
    _post("create_issue", f"{_PROJECT}/issues"),
    _put("edit_issue", f"{_PROJECT}/issues/:issue_id"),
    # --- Labels ---
    _list("list_labels", f"{_PROJECT}/labels"),
    _post("create_label", f"{_PROJECT}/labels"),
    _put("edit_label", f"{_PROJECT}/labels"),
    Endpoint("delete_label", "DELETE", f"{_PROJECT}/labels", accepts_params=True),
    # --- Milestones ---
    _list("list_milestones", f"{_PROJECT}/milestones"),
    _get("get_milestone", f"{_PROJECT}/milestones/:milestone_id"),
    _post("create_milestone", f"{_PROJECT}/milestones"),
    _put("edit_milestone", f"{_PROJECT}/milestones/:milestone_id"),
    # --- Notes ---
    _list("list_issue_notes", f"{_PROJECT}/issues/:issue_id/notes"),
    _get("get_issue_note", f"{_PROJECT}/issues/:issue_id/notes/:note_id"),
    _post("create_issue_note", f"{_PROJECT}/issues/:issue_id/notes"),
    _list("list_snippet_notes", f"{_PROJECT}/snippets/:snippet_id/notes"),
    _get("get_snippet_note", f"{_PROJECT}/snippets/:snippet_id/notes/:note_id"),
    _post("create_snippet_note", f"{_PROJECT}/snippets/:snippet_id/notes"),
    _list("list_merge_request_notes", f"{_PROJECT}/merge_requests/:merge_request_id/notes"),
    _get(
        "get_merge_request_note",
        f"{_PROJECT}/merge_requests/:merge_request_id/notes/:note_id",
    ),
    _post("create_merge_request_note", f"{_PROJECT}/merge_requests/:merge_request_id/notes"),
    # --- Deploy keys ---
    _list("list_deploy_keys", f"{_PROJECT}/keys"),
    _get("get_deploy_key", f"{_PROJECT}/keys/:key_id"),
    _post("add_deploy_key", f"{_PROJECT}/keys"),
    _delete("delete_deploy_key", f"{_PROJECT}/keys/:key_id"),
    # --- System hooks ---
    _list("list_system_hooks", "/hooks"),
    _post("add_system_hook", "/hooks"),
    _get("test_system_hook", "/hooks/:hook_id"),
    _delete("delete_system_hook", "/hooks/:hook_id"),
    # --- Groups ---
    _list("list_groups", "/groups"),
    _get("get_group", "/groups/:group_id"),
    _post("create_group", "/groups"),
    _delete("delete_group", "/groups/:group_id"),
    _post(
        "transfer_project_to_group",
        "/groups/:group_id/projects/:project_id",
        accepts_params=False,
    ),
    _list("list_group_members", "/groups/:group_id/members"),
    _post("add_group_member", "/groups/:group_id/members"),
    _delete("remove_group_member", "/groups/:group_id/members/:user_id"),
    # --- Namespaces ---
    _list("list_namespaces", "/namespaces"),
    # --- Snippets ---
    _list("list_snippets", f"{_PROJECT}/snippets"),
    _get("get_snippet", f"{_PROJECT}/snippets/:snippet_id"),
    _get("get_snippet_content", f"{_PROJECT}/snippets/:snippet_id/raw", content_type="text"),
    _post("create_snippet", f"{_PROJECT}/snippets"),
    _put("edit_snippet", f"{_PROJECT}/snippets/:snippet_id"),
    _delete("delete_snippet", f"{_PROJECT}/snippets/:snippet_id"),
    # --- Services ---
    _put("set_gitlab_ci_service", f"{_PROJECT}/services/gitlab-ci", returns_value=False),
    _delete("delete_gitlab_ci_service", f"{_PROJECT}/services/gitlab-ci", returns_value=False),
    _put("set_hipchat_service", f"{_PROJECT}/services/hipchat", returns_value=False),
    _delete("delete_hipchat_service", f"{_PROJECT}/services/hipchat", returns_value=False),
)

ENDPOINTS: dict[str, Endpoint] = {endpoint.name: endpoint for endpoint in _DECLARATIONS}

if len(ENDPOINTS) != len(_DECLARATIONS):
    raise RuntimeError("Duplicate endpoint names in gitlab3.endpoints")


def get_endpoint(name: str) -> Endpoint:
    """Look up an endpoint descriptor by client method name.

    Raises:
        ContractError: If no endpoint has that name.
    """
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise ContractError(f"Unknown endpoint {name!r}") from None
