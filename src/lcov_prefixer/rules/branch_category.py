from __future__ import annotations
"""Branch classification from Azure DevOps predefined variables."""

from collections.abc import Mapping

from lcov_prefixer.domain.entities import BranchCategory, BranchInfo


HEADS_PREFIX = "refs/heads/"
PULL_PREFIX = "refs/pull/"


def strip_heads(ref: str | None) -> str | None:
    if ref is None:
        return None
    ref = ref.strip()
    if ref.startswith(HEADS_PREFIX):
        return ref[len(HEADS_PREFIX):]
    return ref or None


def classify_branch(
    source_branch: str,
    *,
    pull_request_id: str | None = None,
    pull_request_source_branch: str | None = None,
    pull_request_target_branch: str | None = None,
    feature_prefix: str = "feature/",
) -> BranchInfo:
    """Classify a build branch as pull request, feature branch or other.

    Args:
        source_branch: Full ref or bare name, e.g. `refs/heads/feature/login`
            or `refs/pull/42/merge`.
        pull_request_id: Pull request id; any value marks a pull request.
        pull_request_source_branch: Branch the pull request comes from.
        pull_request_target_branch: Branch the pull request merges into.
        feature_prefix: Branch name prefix marking feature branches.
    """
    ref = source_branch.strip()
    pr_id = (pull_request_id or "").strip() or None

    if ref.startswith(PULL_PREFIX) or pr_id:
        if pr_id is None:
            pr_id = ref[len(PULL_PREFIX):].split("/", 1)[0] or None
        return BranchInfo(
            category=BranchCategory.PULL_REQUEST,
            branch_name=strip_heads(pull_request_source_branch) or ref,
            pull_request_id=pr_id,
            source_branch=strip_heads(pull_request_source_branch),
            target_branch=strip_heads(pull_request_target_branch),
        )

    name = strip_heads(ref) or ""
    if feature_prefix and name.startswith(feature_prefix):
        return BranchInfo(category=BranchCategory.FEATURE, branch_name=name)

    return BranchInfo(category=BranchCategory.OTHER, branch_name=name)


def classify_from_env(env: Mapping[str, str], *, feature_prefix: str = "feature/") -> BranchInfo:
    """Classify the branch described by Azure DevOps environment variables.

    Raises:
        ValueError: `BUILD_SOURCEBRANCH` is not set.
    """
    source_branch = (env.get("BUILD_SOURCEBRANCH") or "").strip()
    if not source_branch:
        raise ValueError("Missing BUILD_SOURCEBRANCH; cannot classify branch")

    return classify_branch(
        source_branch,
        pull_request_id=env.get("SYSTEM_PULLREQUEST_PULLREQUESTID"),
        pull_request_source_branch=env.get("SYSTEM_PULLREQUEST_SOURCEBRANCH"),
        pull_request_target_branch=env.get("SYSTEM_PULLREQUEST_TARGETBRANCH"),
        feature_prefix=feature_prefix,
    )
