"""Pluggable coverage report rule actions."""

from .branch_category import classify_branch, classify_from_env
from .normalize_paths import NormalizeCoveragePathsAction
from .sonar_properties import GenerateSonarPropertiesAction, build_sonar_properties
from .validate_prefix import ValidateCoveragePrefixAction

__all__ = [
	"NormalizeCoveragePathsAction",
	"ValidateCoveragePrefixAction",
	"GenerateSonarPropertiesAction",
	"build_sonar_properties",
	"classify_branch",
	"classify_from_env",
]
