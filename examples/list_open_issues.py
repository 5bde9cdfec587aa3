"""List the open issues of a project, page by page.

Demonstrates:
- Configuration from GITLAB_* environment variables (or a .env file)
- Structured logging of every API call
- Paginator over a list endpoint
- Absent value on a missing project and ApiError handling

Requirements:
- GITLAB_URL (e.g. https://gitlab.example.com/api/v3)
- GITLAB_PRIVATE_TOKEN

Run:
    python3 examples/list_open_issues.py group/project
"""

import logging
import sys

from gitlab3 import ApiError, GitLabClient, configure_logging

configure_logging(log_format="text")
logger = logging.getLogger("gitlab3.examples")


def main(project_id: str) -> int:
    with GitLabClient.from_config() as gl:
        if gl.get_project(project_id) is None:
            logger.error("Project %s not found", project_id)
            return 1

        issues = gl.paginate(
            gl.list_issues, project_id, params={"state": "opened", "per_page": 50}
        )
        try:
            for issue in issues:
                print(f"#{issue['iid']:<6} {issue['title']}")
        except ApiError as e:
            logger.error("Listing stopped with HTTP %d: %s", e.status, e.body)
            return 2

    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(64)
    sys.exit(main(sys.argv[1]))
