from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .canonical import canonicalize
from .conditions import Condition
from .config import BuildConfig
from .diagnostics import Diagnostics, LoggingDiagnostics
from .filters import Matcher, is_accepted
from .loc import lines_of_code
from .model import Dependencies, DependencyInfo, PackageMetadata
from .provider import MetadataProvider, PythonMetadataProvider


logger = logging.getLogger(__name__)

# Pseudo-import used for foreign function interfaces; never a real package.
FOREIGN_IMPORT = "C"


class _Terminated(Exception):
	"""Raised when a termination condition is met; unwinds the whole walk."""


class Builder:
	"""Walks imports from a set of roots and accumulates a Dependencies graph.

	Each package is resolved through the metadata provider, canonicalized,
	filtered, and visited at most once. Termination conditions are checked
	after every new node; the first one that holds stops the walk and the
	graph built so far is returned as a normal result.
	"""

	def __init__(
		self,
		provider: MetadataProvider,
		roots: Sequence[str],
		base_dir: str = ".",
		ignored: Sequence[Matcher] = (),
		included: Sequence[Matcher] = (),
		include_tests: bool = False,
		include_stdlib: bool = False,
		termination_conditions: Sequence[Condition] = (),
		diagnostics: Optional[Diagnostics] = None,
	) -> None:
		self.provider = provider
		self.roots = list(roots)
		self.base_dir = base_dir
		self.ignored = list(ignored)
		self.included = list(included)
		self.include_tests = include_tests
		self.include_stdlib = include_stdlib
		self.termination_conditions = list(termination_conditions)
		self.diagnostics = diagnostics or LoggingDiagnostics()
		self.deps = Dependencies()

	def build(self) -> Dependencies:
		"""Build the graph. ResolutionError and any other failure propagate."""
		self.deps = Dependencies()
		try:
			self._add_all(self.roots)
		except _Terminated:
			logger.debug("termination condition met after %d packages", len(self.deps.forward))
		return self.deps

	def _add_all(self, roots: Iterable[str]) -> None:
		for root in roots:
			if self._add(root, is_root=True) is None:
				self.diagnostics.warning(f"ignoring root package {root!r}")

	def _add(self, identity: str, is_root: bool = False) -> Optional[str]:
		"""Add a package and everything it imports; None if it is not included."""
		if identity == FOREIGN_IMPORT:
			return None

		meta = self.provider.resolve(identity, self.base_dir)
		name = canonicalize(meta.import_path)

		if not is_accepted(name, meta.is_system_library, self.ignored, self.included, self.include_stdlib):
			self.deps.ignored.insert(name)
			return None

		if is_root and name not in self.deps.roots:
			self.deps.roots.append(name)

		if self.deps.forward.has(name):
			# already walked
			return name

		logger.debug("visiting %s", name)
		node = self.deps.forward.pkg(name)
		self.deps.info[name] = DependencyInfo(lines_of_code=lines_of_code(self._files(meta), self.diagnostics))

		for condition in self.termination_conditions:
			if condition(self.deps):
				raise _Terminated()

		for imp in self._imports(meta):
			child = self._add(imp)
			if child is None:
				continue
			node.insert(child)

		return name

	def _imports(self, meta: PackageMetadata) -> List[str]:
		candidates = list(meta.imports)
		if self.include_tests:
			candidates += meta.test_imports
			candidates += meta.external_test_imports
		imports: List[str] = []
		found = set()
		for imp in candidates:
			# a test importing its own package must not loop back
			if imp == meta.import_path or imp in found:
				continue
			found.add(imp)
			imports.append(imp)
		return imports

	def _files(self, meta: PackageMetadata) -> List[str]:
		files = list(meta.source_files)
		if self.include_tests:
			files += meta.test_source_files
			files += meta.external_test_source_files
		return files


def build_dependencies(
	config: BuildConfig,
	provider: Optional[MetadataProvider] = None,
	conditions: Sequence[Condition] = (),
	diagnostics: Optional[Diagnostics] = None,
) -> Dependencies:
	diagnostics = diagnostics or LoggingDiagnostics()
	if provider is None:
		provider = PythonMetadataProvider(config.search_paths, diagnostics=diagnostics)
	builder = Builder(
		provider,
		config.roots,
		base_dir=config.base_dir,
		ignored=config.ignore_matchers(),
		included=config.include_matchers(),
		include_tests=config.include_tests,
		include_stdlib=config.include_stdlib,
		termination_conditions=[*config.termination_conditions(), *conditions],
		diagnostics=diagnostics,
	)
	return builder.build()
