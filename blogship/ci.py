"""CI trigger surface for blogship.

Every branch except trunk runs the verification job so a change is checked
before it can be merged; trunk alone runs the publish job.
"""

from __future__ import annotations

from collections.abc import Mapping

VERIFY = "verify"
PUBLISH = "publish"

# GitLab, GitHub Actions, and generic runners, in that order.
BRANCH_VARIABLES = (
    "CI_COMMIT_BRANCH",
    "CI_COMMIT_REF_NAME",
    "GITHUB_REF_NAME",
    "BRANCH_NAME",
)


def current_branch(environ: Mapping[str, str]) -> str | None:
    """Return the branch the CI run was triggered for, if the platform says."""
    for name in BRANCH_VARIABLES:
        value = environ.get(name, "").strip()
        if value:
            return value
    return None


def job_for_branch(branch: str, trunk: str) -> str:
    """Return the job a branch runs: publish on trunk, verify everywhere else."""
    return PUBLISH if branch == trunk else VERIFY
