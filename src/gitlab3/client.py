"""GitLab v3 REST API client.

One method per endpoint in `gitlab3.endpoints.ENDPOINTS`. Each method is a
thin wrapper: it forwards its path arguments and params to
`Mediator.call` with the matching descriptor and returns the decoded body.

Conventions:
- GET methods return None when GitLab answers 404
- Methods of endpoints that take params accept an optional `params`
  mapping as their last argument; nested values use the Rails bracket
  convention on the wire (see gitlab3.encoding)
- List methods return a single page; wrap them with `paginate()` to walk
  the whole collection

Reference: https://github.com/gitlabhq/gitlabhq/tree/7-14-stable/doc/api
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .config import DEFAULT_URL, GitLabConfig, get_config
from .endpoints import ENDPOINTS
from .errors import ContractError
from .mediator import Mediator
from .paginator import Paginator

logger = logging.getLogger("gitlab3.client")

__all__ = ["GitLabClient"]

Params = Mapping[str, Any] | None
Record = dict[str, Any]


class GitLabClient:
    """GitLab v3 API client.

    Attributes:
        mediator: The Mediator every endpoint method dispatches through
        default_per_page: per_page applied by paginate() when not given

    Example:
        >>> with GitLabClient("https://gitlab.example.com/api/v3", "s3cr3t") as gl:
        ...     for issue in gl.paginate(gl.list_issues, "group/project"):
        ...         print(issue["iid"], issue["title"])
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        private_token: str | None = None,
        *,
        default_per_page: int | None = None,
        mediator: Mediator | None = None,
        **mediator_options: Any,
    ) -> None:
        """Initialize the client.

        Args:
            url: API base URL including the /api/v3 prefix
            private_token: Private token for authentication
            default_per_page: per_page used by paginate() when not given
            mediator: Pre-built Mediator (url/private_token/options ignored)
            **mediator_options: Passed through to Mediator (token_location,
                sudo, body_encoding, timeout, verify, user_agent, http_client)
        """
        self.mediator = mediator or Mediator(url, private_token, **mediator_options)
        self.default_per_page = default_per_page

    @classmethod
    def from_config(
        cls, config: GitLabConfig | None = None, **mediator_options: Any
    ) -> "GitLabClient":
        """Build a client from GitLabConfig (defaults to get_config())."""
        config = config or get_config()
        return cls(
            mediator=Mediator.from_config(config, **mediator_options),
            default_per_page=config.default_per_page,
        )

    def __enter__(self) -> "GitLabClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        self.mediator.close()

    def _call(self, name: str, *path_args: Any, params: Params = None) -> Any:
        return self.mediator.call(ENDPOINTS[name], *path_args, params=params)

    # --- Pagination ---

    def paginate(
        self,
        method: Callable[..., Any] | str,
        *args: Any,
        params: Params = None,
    ) -> Paginator:
        """Wrap a list method in a single-pass Paginator.

        Args:
            method: Bound list method (e.g. `client.list_issues`) or its name
            *args: Leading path arguments for the method
            params: Initial params; may carry page and per_page

        Returns:
            Paginator over the collection

        Raises:
            ContractError: If the endpoint does not support pagination.

        Example:
            >>> open_issues = client.paginate(
            ...     client.list_issues, 42, params={"state": "opened"}
            ... ).all()
        """
        if isinstance(method, str):
            name = method
            method = getattr(self, name, None)
            if name not in ENDPOINTS or method is None:
                raise ContractError(f"Unknown endpoint {name!r}")

        endpoint = ENDPOINTS.get(getattr(method, "__name__", ""))
        if endpoint is not None and not endpoint.paginated:
            raise ContractError(f"{endpoint.name} does not support pagination")

        params = dict(params or {})
        if self.default_per_page is not None:
            params.setdefault("per_page", self.default_per_page)
        return Paginator(method, *args, params=params)

    # --- Session ---

    def login(self, login: str, password: str) -> Record | None:
        """Exchange a login (username or email) and password for a user record.

        The returned record carries the user's `private_token`.
        """
        return self._call("login", params={"login": login, "password": password})

    # --- Users ---

    def list_users(self, params: Params = None) -> list[Record]:
        """List users. Accepts `search`, `page`, `per_page`."""
        return self._call("list_users", params=params)

    def get_user(self, user_id: int) -> Record | None:
        return self._call("get_user", user_id)

    def create_user(self, params: Params = None) -> Record:
        """Create a user (admin only).

        Args:
            params: email, password, username and name are required;
                optional skype, linkedin, twitter, projects_limit,
                extern_uid, provider, bio, admin, can_create_group
        """
        return self._call("create_user", params=params)

    def edit_user(self, user_id: int, params: Params = None) -> Record:
        return self._call("edit_user", user_id, params=params)

    def delete_user(self, user_id: int) -> Record:
        return self._call("delete_user", user_id)

    def block_user(self, user_id: int) -> None:
        self._call("block_user", user_id)

    def unblock_user(self, user_id: int) -> None:
        self._call("unblock_user", user_id)

    def current_user(self) -> Record | None:
        """The user the private token belongs to."""
        return self._call("current_user")

    # --- SSH keys ---

    def list_ssh_keys(self, params: Params = None) -> list[Record]:
        return self._call("list_ssh_keys", params=params)

    def get_ssh_key(self, key_id: int) -> Record | None:
        return self._call("get_ssh_key", key_id)

    def add_ssh_key(self, title: str, key: str) -> Record:
        return self._call("add_ssh_key", params={"title": title, "key": key})

    def delete_ssh_key(self, key_id: int) -> Record:
        return self._call("delete_ssh_key", key_id)

    def list_user_ssh_keys(self, user_id: int, params: Params = None) -> list[Record]:
        return self._call("list_user_ssh_keys", user_id, params=params)

    def add_user_ssh_key(self, user_id: int, title: str, key: str) -> Record:
        """Add an SSH key on behalf of another user (admin only)."""
        return self._call(
            "add_user_ssh_key", user_id, params={"title": title, "key": key}
        )

    def delete_user_ssh_key(self, user_id: int, key_id: int) -> Record:
        return self._call("delete_user_ssh_key", user_id, key_id)

    # --- Projects ---

    def list_projects(self, params: Params = None) -> list[Record]:
        """Projects the authenticated user is a member of.

        Args:
            params: archived, order_by, sort, search, page, per_page
        """
        return self._call("list_projects", params=params)

    def list_owned_projects(self, params: Params = None) -> list[Record]:
        return self._call("list_owned_projects", params=params)

    def list_all_projects(self, params: Params = None) -> list[Record]:
        """Every project on the instance (admin only)."""
        return self._call("list_all_projects", params=params)

    def search_projects(self, query: str, params: Params = None) -> list[Record]:
        return self._call("search_projects", query, params=params)

    def get_project(self, project_id: int | str) -> Record | None:
        """Get a project by numeric id or `namespace/project` path."""
        return self._call("get_project", project_id)

    def list_project_events(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_project_events", project_id, params=params)

    def create_project(self, params: Params = None) -> Record:
        """Create a project owned by the authenticated user.

        Args:
            params: name is required; optional path, namespace_id,
                description, issues_enabled, merge_requests_enabled,
                wiki_enabled, snippets_enabled, public, visibility_level,
                import_url
        """
        return self._call("create_project", params=params)

    def create_project_for_user(self, user_id: int, params: Params = None) -> Record:
        return self._call("create_project_for_user", user_id, params=params)

    def delete_project(self, project_id: int | str) -> Any:
        return self._call("delete_project", project_id)

    def fork_project(self, project_id: int | str) -> Record:
        """Fork a project into the authenticated user's namespace."""
        return self._call("fork_project", project_id)

    def create_fork_relation(self, project_id: int | str, forked_from_id: int) -> Record:
        """Mark an existing project as a fork of another (admin only)."""
        return self._call("create_fork_relation", project_id, forked_from_id)

    def delete_fork_relation(self, project_id: int | str) -> None:
        self._call("delete_fork_relation", project_id)

    # --- Project members ---

    def list_project_members(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_project_members", project_id, params=params)

    def get_project_member(self, project_id: int | str, user_id: int) -> Record | None:
        return self._call("get_project_member", project_id, user_id)

    def add_project_member(
        self, project_id: int | str, user_id: int, access_level: int
    ) -> Record:
        """Add a user to a project.

        Args:
            project_id: Project id or path
            user_id: User to add
            access_level: 10 guest, 20 reporter, 30 developer, 40 master
        """
        return self._call(
            "add_project_member",
            project_id,
            params={"user_id": user_id, "access_level": access_level},
        )

    def edit_project_member(
        self, project_id: int | str, user_id: int, access_level: int
    ) -> Record:
        return self._call(
            "edit_project_member",
            project_id,
            user_id,
            params={"access_level": access_level},
        )

    def remove_project_member(self, project_id: int | str, user_id: int) -> Any:
        return self._call("remove_project_member", project_id, user_id)

    # --- Project hooks ---

    def list_project_hooks(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_project_hooks", project_id, params=params)

    def get_project_hook(self, project_id: int | str, hook_id: int) -> Record | None:
        return self._call("get_project_hook", project_id, hook_id)

    def add_project_hook(self, project_id: int | str, params: Params = None) -> Record:
        """Add a web hook.

        Args:
            params: url is required; optional push_events, issues_events,
                merge_requests_events, tag_push_events
        """
        return self._call("add_project_hook", project_id, params=params)

    def edit_project_hook(self, project_id: int | str, hook_id: int, params: Params = None) -> Record:
        return self._call("edit_project_hook", project_id, hook_id, params=params)

    def delete_project_hook(self, project_id: int | str, hook_id: int) -> Any:
        return self._call("delete_project_hook", project_id, hook_id)

    # --- Branches ---

    def list_branches(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_branches", project_id, params=params)

    def get_branch(self, project_id: int | str, branch: str) -> Record | None:
        """Branch names containing `/` are percent-encoded into one segment."""
        return self._call("get_branch", project_id, branch)

    def create_branch(self, project_id: int | str, branch_name: str, ref: str) -> Record:
        return self._call(
            "create_branch",
            project_id,
            params={"branch_name": branch_name, "ref": ref},
        )

    def delete_branch(self, project_id: int | str, branch: str) -> Any:
        return self._call("delete_branch", project_id, branch)

    def protect_branch(self, project_id: int | str, branch: str) -> Record:
        return self._call("protect_branch", project_id, branch)

    def unprotect_branch(self, project_id: int | str, branch: str) -> Record:
        return self._call("unprotect_branch", project_id, branch)

    # --- Tags ---

    def list_tags(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_tags", project_id, params=params)

    def create_tag(self, project_id: int | str, params: Params = None) -> Record:
        """Create a tag.

        Args:
            params: tag_name and ref are required; message makes it annotated
        """
        return self._call("create_tag", project_id, params=params)

    # --- Repository ---

    def list_tree(self, project_id: int | str, params: Params = None) -> list[Record] | None:
        """Files and directories of a repository. Accepts `path`, `ref_name`."""
        return self._call("list_tree", project_id, params=params)

    def get_raw_file(self, project_id: int | str, sha: str, filepath: str) -> str | None:
        """Raw content of `filepath` at commit/branch `sha`."""
        return self._call("get_raw_file", project_id, sha, params={"filepath": filepath})

    def get_raw_blob(self, project_id: int | str, sha: str) -> str | None:
        return self._call("get_raw_blob", project_id, sha)

    def get_archive(self, project_id: int | str, params: Params = None) -> bytes | None:
        """tar.gz archive of the repository, as bytes. Accepts `sha`."""
        return self._call("get_archive", project_id, params=params)

    def compare(self, project_id: int | str, from_ref: str, to_ref: str) -> Record | None:
        return self._call(
            "compare", project_id, params={"from": from_ref, "to": to_ref}
        )

    def list_contributors(self, project_id: int | str) -> list[Record] | None:
        return self._call("list_contributors", project_id)

    # --- Commits ---

    def list_commits(self, project_id: int | str, params: Params = None) -> list[Record]:
        """Commits of a branch. Accepts `ref_name`, `page`, `per_page`."""
        return self._call("list_commits", project_id, params=params)

    def get_commit(self, project_id: int | str, sha: str) -> Record | None:
        return self._call("get_commit", project_id, sha)

    def get_commit_diff(self, project_id: int | str, sha: str) -> list[Record] | None:
        return self._call("get_commit_diff", project_id, sha)

    def list_commit_comments(self, project_id: int | str, sha: str, params: Params = None) -> list[Record]:
        return self._call("list_commit_comments", project_id, sha, params=params)

    def add_commit_comment(self, project_id: int | str, sha: str, params: Params = None) -> Record:
        """Comment on a commit.

        Args:
            params: note is required; path, line and line_type place it on a diff line
        """
        return self._call("add_commit_comment", project_id, sha, params=params)

    # --- Repository files ---

    def get_file(self, project_id: int | str, file_path: str, ref: str) -> Record | None:
        """File metadata and base64 content at `ref`."""
        return self._call(
            "get_file", project_id, params={"file_path": file_path, "ref": ref}
        )

    def create_file(self, project_id: int | str, params: Params = None) -> Record:
        """Create a file.

        Args:
            params: file_path, branch_name, content and commit_message are
                required; encoding may be text or base64
        """
        return self._call("create_file", project_id, params=params)

    def update_file(self, project_id: int | str, params: Params = None) -> Record:
        return self._call("update_file", project_id, params=params)

    def delete_file(self, project_id: int | str, params: Params = None) -> Record:
        return self._call("delete_file", project_id, params=params)

    # --- Merge requests ---

    def list_merge_requests(self, project_id: int | str, params: Params = None) -> list[Record]:
        """Merge requests of a project. Accepts `state`, `order_by`, `sort`."""
        return self._call("list_merge_requests", project_id, params=params)

    def get_merge_request(self, project_id: int | str, merge_request_id: int) -> Record | None:
        return self._call("get_merge_request", project_id, merge_request_id)

    def get_merge_request_changes(self, project_id: int | str, merge_request_id: int) -> Record | None:
        return self._call("get_merge_request_changes", project_id, merge_request_id)

    def create_merge_request(self, project_id: int | str, params: Params = None) -> Record:
        """Open a merge request.

        Args:
            params: source_branch, target_branch and title are required;
                optional assignee_id, target_project_id, description, labels
        """
        return self._call("create_merge_request", project_id, params=params)

    def edit_merge_request(self, project_id: int | str, merge_request_id: int, params: Params = None) -> Record:
        return self._call("edit_merge_request", project_id, merge_request_id, params=params)

    def accept_merge_request(self, project_id: int | str, merge_request_id: int, params: Params = None) -> Record:
        """Merge it. Accepts `merge_commit_message`."""
        return self._call("accept_merge_request", project_id, merge_request_id, params=params)

    def list_merge_request_comments(
        self, project_id: int | str, merge_request_id: int, params: Params = None
    ) -> list[Record]:
        return self._call(
            "list_merge_request_comments", project_id, merge_request_id, params=params
        )

    def add_merge_request_comment(self, project_id: int | str, merge_request_id: int, note: str) -> Record:
        return self._call(
            "add_merge_request_comment",
            project_id,
            merge_request_id,
            params={"note": note},
        )

    # --- Issues ---

    def list_all_issues(self, params: Params = None) -> list[Record]:
        """Issues across all projects of the authenticated user."""
        return self._call("list_all_issues", params=params)

    def list_issues(self, project_id: int | str, params: Params = None) -> list[Record]:
        """Issues of a project.

        Args:
            project_id: Project id or path
            params: state (opened, closed), labels, milestone, page, per_page
        """
        return self._call("list_issues", project_id, params=params)

    def get_issue(self, project_id: int | str, issue_id: int) -> Record | None:
        return self._call("get_issue", project_id, issue_id)

    def create_issue(self, project_id: int | str, params: Params = None) -> Record:
        """Create an issue.

        Args:
            params: title is required; optional description, assignee_id,
                milestone_id, labels (comma separated)
        """
        return self._call("create_issue", project_id, params=params)

    def edit_issue(self, project_id: int | str, issue_id: int, params: Params = None) -> Record:
        """Update an issue. `state_event` of close or reopen changes its state."""
        return self._call("edit_issue", project_id, issue_id, params=params)

    # --- Labels ---

    def list_labels(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_labels", project_id, params=params)

    def create_label(self, project_id: int | str, name: str, color: str) -> Record:
        """Create a label. `color` is a #RRGGBB string."""
        return self._call(
            "create_label", project_id, params={"name": name, "color": color}
        )

    def edit_label(self, project_id: int | str, params: Params = None) -> Record:
        """Rename or recolor a label. name is required; new_name and/or color."""
        return self._call("edit_label", project_id, params=params)

    def delete_label(self, project_id: int | str, name: str) -> Any:
        return self._call("delete_label", project_id, params={"name": name})

    # --- Milestones ---

    def list_milestones(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_milestones", project_id, params=params)

    def get_milestone(self, project_id: int | str, milestone_id: int) -> Record | None:
        return self._call("get_milestone", project_id, milestone_id)

    def create_milestone(self, project_id: int | str, params: Params = None) -> Record:
        """Create a milestone. title is required; description and due_date optional."""
        return self._call("create_milestone", project_id, params=params)

    def edit_milestone(self, project_id: int | str, milestone_id: int, params: Params = None) -> Record:
        return self._call("edit_milestone", project_id, milestone_id, params=params)

    # --- Notes ---

    def list_issue_notes(self, project_id: int | str, issue_id: int, params: Params = None) -> list[Record]:
        return self._call("list_issue_notes", project_id, issue_id, params=params)

    def get_issue_note(self, project_id: int | str, issue_id: int, note_id: int) -> Record | None:
        return self._call("get_issue_note", project_id, issue_id, note_id)

    def create_issue_note(self, project_id: int | str, issue_id: int, body: str) -> Record:
        return self._call("create_issue_note", project_id, issue_id, params={"body": body})

    def list_snippet_notes(self, project_id: int | str, snippet_id: int, params: Params = None) -> list[Record]:
        return self._call("list_snippet_notes", project_id, snippet_id, params=params)

    def get_snippet_note(self, project_id: int | str, snippet_id: int, note_id: int) -> Record | None:
        return self._call("get_snippet_note", project_id, snippet_id, note_id)

    def create_snippet_note(self, project_id: int | str, snippet_id: int, body: str) -> Record:
        return self._call("create_snippet_note", project_id, snippet_id, params={"body": body})

    def list_merge_request_notes(
        self, project_id: int | str, merge_request_id: int, params: Params = None
    ) -> list[Record]:
        return self._call("list_merge_request_notes", project_id, merge_request_id, params=params)

    def get_merge_request_note(
        self, project_id: int | str, merge_request_id: int, note_id: int
    ) -> Record | None:
        return self._call("get_merge_request_note", project_id, merge_request_id, note_id)

    def create_merge_request_note(self, project_id: int | str, merge_request_id: int, body: str) -> Record:
        return self._call(
            "create_merge_request_note",
            project_id,
            merge_request_id,
            params={"body": body},
        )

    # --- Deploy keys ---

    def list_deploy_keys(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_deploy_keys", project_id, params=params)

    def get_deploy_key(self, project_id: int | str, key_id: int) -> Record | None:
        return self._call("get_deploy_key", project_id, key_id)

    def add_deploy_key(self, project_id: int | str, title: str, key: str) -> Record:
        return self._call("add_deploy_key", project_id, params={"title": title, "key": key})

    def delete_deploy_key(self, project_id: int | str, key_id: int) -> Any:
        return self._call("delete_deploy_key", project_id, key_id)

    # --- System hooks ---

    def list_system_hooks(self, params: Params = None) -> list[Record]:
        return self._call("list_system_hooks", params=params)

    def add_system_hook(self, url: str) -> Record:
        return self._call("add_system_hook", params={"url": url})

    def test_system_hook(self, hook_id: int) -> Record | None:
        """Trigger a test event for a system hook and return the sample payload."""
        return self._call("test_system_hook", hook_id)

    def delete_system_hook(self, hook_id: int) -> Any:
        return self._call("delete_system_hook", hook_id)

    # --- Groups ---

    def list_groups(self, params: Params = None) -> list[Record]:
        return self._call("list_groups", params=params)

    def get_group(self, group_id: int | str) -> Record | None:
        """Group details including its projects."""
        return self._call("get_group", group_id)

    def create_group(self, name: str, path: str, params: Params = None) -> Record:
        return self._call(
            "create_group", params={"name": name, "path": path, **(params or {})}
        )

    def delete_group(self, group_id: int | str) -> Any:
        return self._call("delete_group", group_id)

    def transfer_project_to_group(self, group_id: int | str, project_id: int) -> Record:
        """Move a project into a group's namespace (admin only)."""
        return self._call("transfer_project_to_group", group_id, project_id)

    def list_group_members(self, group_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_group_members", group_id, params=params)

    def add_group_member(self, group_id: int | str, user_id: int, access_level: int) -> Record:
        return self._call(
            "add_group_member",
            group_id,
            params={"user_id": user_id, "access_level": access_level},
        )

    def remove_group_member(self, group_id: int | str, user_id: int) -> Any:
        return self._call("remove_group_member", group_id, user_id)

    # --- Namespaces ---

    def list_namespaces(self, params: Params = None) -> list[Record]:
        """User and group namespaces (admin only). Accepts `search`."""
        return self._call("list_namespaces", params=params)

    # --- Snippets ---

    def list_snippets(self, project_id: int | str, params: Params = None) -> list[Record]:
        return self._call("list_snippets", project_id, params=params)

    def get_snippet(self, project_id: int | str, snippet_id: int) -> Record | None:
        return self._call("get_snippet", project_id, snippet_id)

    def get_snippet_content(self, project_id: int | str, snippet_id: int) -> str | None:
        return self._call("get_snippet_content", project_id, snippet_id)

    def create_snippet(self, project_id: int | str, params: Params = None) -> Record:
        """Create a snippet.

        Args:
            params: title, file_name, code and visibility_level are required
        """
        return self._call("create_snippet", project_id, params=params)

    def edit_snippet(self, project_id: int | str, snippet_id: int, params: Params = None) -> Record:
        return self._call("edit_snippet", project_id, snippet_id, params=params)

    def delete_snippet(self, project_id: int | str, snippet_id: int) -> Any:
        return self._call("delete_snippet", project_id, snippet_id)

    # --- Services ---

    def set_gitlab_ci_service(self, project_id: int | str, token: str, project_url: str) -> None:
        self._call(
            "set_gitlab_ci_service",
            project_id,
            params={"token": token, "project_url": project_url},
        )

    def delete_gitlab_ci_service(self, project_id: int | str) -> None:
        self._call("delete_gitlab_ci_service", project_id)

    def set_hipchat_service(self, project_id: int | str, token: str, room: str) -> None:
        self._call(
            "set_hipchat_service", project_id, params={"token": token, "room": room}
        )

    def delete_hipchat_service(self, project_id: int | str) -> None:
        self._call("delete_hipchat_service", project_id)
