from __future__ import annotations
"""Rule action to write branch-conditional SonarQube analysis properties."""

import logging
from pathlib import Path

from lcov_prefixer.domain.actions import Action
from lcov_prefixer.domain.entities import ActionResult, BranchCategory, BranchInfo, ReportContext


LOGGER = logging.getLogger(__name__)


def build_sonar_properties(
    branch: BranchInfo,
    *,
    sources: str,
    lcov_report_path: str,
    reference_branch: str = "main",
    project_key: str | None = None,
    project_name: str | None = None,
) -> dict[str, str]:
    """Return analysis properties for one branch category.

    Pull requests get decoration and a blocking quality gate. Feature branches
    are analysed as new code against `reference_branch` with a non-blocking
    gate. Other branches get a full branch analysis whose gate blocks only on
    the reference branch itself.
    """
    properties: dict[str, str] = {}
    if project_key:
        properties["sonar.projectKey"] = _sanitize_key(project_key)
    if project_name:
        properties["sonar.projectName"] = project_name
    properties["sonar.sources"] = sources
    properties["sonar.sourceEncoding"] = "UTF-8"
    properties["sonar.javascript.lcov.reportPaths"] = lcov_report_path

    if branch.category is BranchCategory.PULL_REQUEST:
        if branch.pull_request_id:
            properties["sonar.pullrequest.key"] = branch.pull_request_id
        properties["sonar.pullrequest.branch"] = branch.source_branch or branch.branch_name
        properties["sonar.pullrequest.base"] = branch.target_branch or reference_branch
        properties["sonar.qualitygate.wait"] = "true"
    elif branch.category is BranchCategory.FEATURE:
        properties["sonar.branch.name"] = branch.branch_name
        properties["sonar.newCode.referenceBranch"] = reference_branch
        properties["sonar.qualitygate.wait"] = "false"
    else:
        properties["sonar.branch.name"] = branch.branch_name
        properties["sonar.qualitygate.wait"] = "true" if branch.branch_name == reference_branch else "false"

    return properties


def render_properties(properties: dict[str, str]) -> str:
    return "".join(f"{key}={value}\n" for key, value in properties.items())


def _sanitize_key(value: str) -> str:
    allowed = []
    for char in value:
        if char.isalnum() or char in {"_", "-", ".", ":"}:
            allowed.append(char)
        else:
            allowed.append("_")
    return "".join(allowed)


class GenerateSonarPropertiesAction(Action):
    """Write a `sonar-project.properties` style file for the current branch.

    `sonar.sources` is the report prefix and the LCOV path is the rewritten
    report's output path, so the analysis resolves the prefixed paths.
    """

    def __init__(
        self,
        branch: BranchInfo,
        *,
        target_path: Path,
        overwrite: bool = False,
        reference_branch: str = "main",
        project_key: str | None = None,
        project_name: str | None = None,
    ) -> None:
        """Initialize action.

        Args:
            branch: Classified branch being built.
            target_path: Properties file to write.
            overwrite: Replace file if it already exists. Default False.
            reference_branch: Branch new code is compared against.
            project_key: Optional `sonar.projectKey` value.
            project_name: Optional `sonar.projectName` value.
        """
        self._branch = branch
        self._target_path = target_path
        self._overwrite = overwrite
        self._reference_branch = reference_branch
        self._project_key = project_key
        self._project_name = project_name

    @property
    def name(self) -> str:
        return "write-sonar-properties"

    def execute(self, report_context: ReportContext) -> ActionResult:
        if self._target_path.exists() and not self._overwrite:
            return ActionResult(
                action_name=self.name,
                success=True,
                message=f"{self._target_path.name} already exists, skipped",
                metadata={"path": str(self._target_path), "written": False, "reason": "exists"},
            )

        properties = build_sonar_properties(
            self._branch,
            sources=report_context.prefix,
            lcov_report_path=report_context.output_path.as_posix(),
            reference_branch=self._reference_branch,
            project_key=self._project_key,
            project_name=self._project_name,
        )
        metadata: dict[str, object] = {
            "path": str(self._target_path),
            "branch_category": self._branch.category.value,
            "branch_name": self._branch.branch_name,
            "properties": properties,
        }

        if report_context.dry_run:
            metadata.update({"written": False, "reason": "dry_run"})
            return ActionResult(
                action_name=self.name,
                success=True,
                message="sonar properties planned (dry-run)",
                metadata=metadata,
            )

        self._target_path.parent.mkdir(parents=True, exist_ok=True)
        self._target_path.write_text(render_properties(properties), encoding="utf-8")
        LOGGER.info(
            "sonar properties written",
            extra={
                "event": "rules.sonar_properties.written",
                "path": str(self._target_path),
                "branch_category": self._branch.category.value,
                "quality_gate_wait": properties["sonar.qualitygate.wait"],
            },
        )

        metadata["written"] = True
        return ActionResult(
            action_name=self.name,
            success=True,
            message=f"{self._target_path.name} written",
            metadata=metadata,
        )
