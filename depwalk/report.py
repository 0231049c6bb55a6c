from __future__ import annotations

from typing import List, Optional

from .builder import build_dependencies
from .config import BuildConfig
from .diagnostics import CollectingDiagnostics, Diagnostics, LoggingDiagnostics
from .model import Dependencies, DependenciesReport, PackagePath
from .provider import MetadataProvider


def package_paths(deps: Dependencies, to: str, all_paths: bool = False) -> List[PackagePath]:
	"""Paths from each included root to `to`; roots that cannot reach it are left out."""
	paths: List[PackagePath] = []
	for root in deps.roots:
		if all_paths:
			found = deps.forward.all_paths(root, to)
		else:
			shortest = deps.forward.path(root, to)
			found = [shortest] if shortest else []
		if found:
			paths.append(PackagePath(root=root, to=to, paths=found))
	return paths


def build_report(
	config: BuildConfig,
	to: Optional[str] = None,
	all_paths: bool = False,
	provider: Optional[MetadataProvider] = None,
	diagnostics: Optional[Diagnostics] = None,
) -> DependenciesReport:
	collected = CollectingDiagnostics(forward=diagnostics or LoggingDiagnostics())
	deps = build_dependencies(config, provider=provider, diagnostics=collected)
	report = deps.to_report(collected.messages)
	if to:
		report.paths = package_paths(deps, to, all_paths)
	return report
