from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .graph import Graph, PackageSet


class DependencyInfo(BaseModel):
	model_config = ConfigDict(frozen=True)

	lines_of_code: int = 0


class PackageMetadata(BaseModel):
	"""What a metadata provider knows about one package."""

	import_path: str
	is_system_library: bool = False
	imports: List[str] = []
	test_imports: List[str] = []
	external_test_imports: List[str] = []
	source_files: List[str] = []
	test_source_files: List[str] = []
	external_test_source_files: List[str] = []


@dataclass
class Dependencies:
	# package -> packages it imports
	forward: Graph = field(default_factory=Graph)
	# packages rejected by the filter
	ignored: PackageSet = field(default_factory=PackageSet)
	info: Dict[str, DependencyInfo] = field(default_factory=dict)
	# canonical names of the roots that made it into the graph, in order
	roots: List[str] = field(default_factory=list)

	def to_report(self, warnings: Optional[List[str]] = None) -> "DependenciesReport":
		return DependenciesReport(
			roots=list(self.roots),
			forward=self.forward.to_dict(),
			ignored=self.ignored.sorted(),
			info={pkg: self.info[pkg] for pkg in sorted(self.info)},
			warnings=list(warnings or []),
		)


class PackagePath(BaseModel):
	root: str
	to: str
	paths: List[List[str]] = []


class DependenciesReport(BaseModel):
	roots: List[str] = []
	forward: Dict[str, List[str]]
	ignored: List[str] = []
	info: Dict[str, DependencyInfo] = {}
	warnings: List[str] = []
	paths: List[PackagePath] = []
