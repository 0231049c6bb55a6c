"""Metadata providers: turn an import identity into a PackageMetadata record.

The builder only depends on the MetadataProvider protocol. Two implementations
live here:

- StaticMetadataProvider answers from an in-memory mapping.
- PythonMetadataProvider resolves dotted Python package names on disk and
  extracts their imports with the ast module.
"""

from __future__ import annotations

import ast
import fnmatch
import os
import sys
import sysconfig
from collections import Counter
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Protocol, Tuple, Union

from .diagnostics import Diagnostics, LoggingDiagnostics
from .errors import ResolutionError
from .model import PackageMetadata


TEST_FILE_PATTERNS: Tuple[str, ...] = ("test_*.py", "*_test.py", "conftest.py")
EXTERNAL_TESTS_DIR = "tests"
SKIP_DIRS = {"__pycache__", ".git", ".mypy_cache", ".pytest_cache"}
IMPORT_ERROR_NAMES = {"ImportError", "ModuleNotFoundError", "Exception", "BaseException"}


class MetadataProvider(Protocol):
	def resolve(self, identity: str, base_dir: str) -> PackageMetadata:
		...


class StaticMetadataProvider:
	"""Serves metadata from a mapping of identity -> PackageMetadata (or dict).

	Every call is counted in `calls`, keyed by (identity, base_dir).
	"""

	def __init__(self, packages: Mapping[str, Union[PackageMetadata, dict]]) -> None:
		self.packages: Dict[str, PackageMetadata] = {}
		for identity, meta in packages.items():
			if not isinstance(meta, PackageMetadata):
				meta = PackageMetadata(**{"import_path": identity, **meta})
			self.packages[identity] = meta
		self.calls: Counter = Counter()

	def resolve(self, identity: str, base_dir: str) -> PackageMetadata:
		self.calls[(identity, base_dir)] += 1
		meta = self.packages.get(identity)
		if meta is None:
			raise ResolutionError(identity, base_dir, "unknown package")
		return meta


def is_stdlib_name(name: str) -> bool:
	return name.split(".", 1)[0] in sys.stdlib_module_names


def is_test_file(filename: str) -> bool:
	return any(fnmatch.fnmatchcase(filename, p) for p in TEST_FILE_PATTERNS)


def is_valid_name(name: str) -> bool:
	return bool(name) and all(part.isidentifier() for part in name.split("."))


def has_python_files(directory: str) -> bool:
	if not os.path.isdir(directory):
		return False
	return any(
		entry.endswith(".py") and os.path.isfile(os.path.join(directory, entry))
		for entry in os.listdir(directory)
	)


def _catches_import_error(handler: ast.ExceptHandler) -> bool:
	if handler.type is None:
		return True
	types = handler.type.elts if isinstance(handler.type, ast.Tuple) else [handler.type]
	for t in types:
		name = t.attr if isinstance(t, ast.Attribute) else getattr(t, "id", None)
		if name in IMPORT_ERROR_NAMES:
			return True
	return False


def absolute_module(module: Optional[str], level: int, package: str) -> Optional[str]:
	"""Resolve a possibly relative `from` target against its containing package."""
	if level == 0:
		return module or ""
	parts = package.split(".") if package else []
	keep = len(parts) - (level - 1)
	if keep <= 0:
		return None
	base = ".".join(parts[:keep])
	return f"{base}.{module}" if module else base


class ImportCollector(ast.NodeVisitor):
	"""Collects (name, guarded) pairs for every import in a module.

	An import is guarded when it sits in the body of a try statement whose
	handlers catch ImportError.
	"""

	def __init__(self, package: str) -> None:
		self.package = package
		self.imports: List[Tuple[str, bool]] = []
		self._guarded = 0

	def visit_Try(self, node: ast.Try) -> None:
		guarded = any(_catches_import_error(h) for h in node.handlers)
		if guarded:
			self._guarded += 1
		for stmt in node.body:
			self.visit(stmt)
		if guarded:
			self._guarded -= 1
		for part in [*node.handlers, *node.orelse, *node.finalbody]:
			self.visit(part)

	visit_TryStar = visit_Try

	def visit_Import(self, node: ast.Import) -> None:
		for alias in node.names:
			self.imports.append((alias.name, self._guarded > 0))

	def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
		module = absolute_module(node.module, node.level, self.package)
		if module is None:
			return
		for alias in node.names:
			if alias.name == "*" or not module:
				name = module or alias.name
			else:
				name = f"{module}.{alias.name}"
			self.imports.append((name, self._guarded > 0))


def parse_imports(text: str, path: str, package: str) -> List[Tuple[str, bool]]:
	tree = ast.parse(text, filename=path)
	collector = ImportCollector(package)
	collector.visit(tree)
	return collector.imports


class Location(NamedTuple):
	package: str
	directory: str
	root: str
	module_file: Optional[str] = None


class PythonMetadataProvider:
	"""Resolves dotted Python package names against a list of search roots.

	A package is a directory holding `__init__.py` (regular) or at least one
	`.py` file (namespace); a module inside one belongs to it, and a top-level
	module file is a package of its own. Roots are searched in order: the base
	directory, `search_paths`, the interpreter's standard library, then the
	site-packages directories (`site_dirs`, defaulting to sysconfig's purelib
	and platlib). As with the import system, a regular package or module on any
	root wins over a namespace directory found earlier.
	"""

	def __init__(
		self,
		search_paths: Iterable[str] = (),
		diagnostics: Optional[Diagnostics] = None,
		stdlib_dir: Optional[str] = None,
		site_dirs: Optional[Iterable[str]] = None,
	) -> None:
		paths = sysconfig.get_paths()
		self.search_paths = [os.path.abspath(p) for p in search_paths]
		self.stdlib_dir = stdlib_dir or paths["stdlib"]
		if site_dirs is None:
			site_dirs = [paths["purelib"], paths["platlib"]]
		self.site_dirs: List[str] = []
		for d in site_dirs:
			d = os.path.abspath(d)
			if d != self.stdlib_dir and d not in self.site_dirs and d not in self.search_paths:
				self.site_dirs.append(d)
		self.diagnostics = diagnostics or LoggingDiagnostics()
		self._locations: Dict[Tuple[str, str], Optional[Location]] = {}
		self._resolved: Dict[Tuple[str, str], PackageMetadata] = {}

	def roots(self, base_dir: str) -> List[str]:
		return [os.path.abspath(base_dir), *self.search_paths, self.stdlib_dir, *self.site_dirs]

	def to_dotted(self, identity: str, base_dir: str) -> str:
		if identity in (".", "..") or identity.startswith(("./", "../")):
			base = os.path.abspath(base_dir)
			rel = os.path.relpath(os.path.normpath(os.path.join(base, identity)), base)
			if rel == "." or rel.startswith(".."):
				raise ResolutionError(identity, base_dir, "path is not below the base directory")
			identity = rel.replace(os.sep, ".")
		if not is_valid_name(identity):
			raise ResolutionError(identity, base_dir, "not a valid package name")
		return identity

	def locate(self, name: str, base_dir: str) -> Optional[Location]:
		key = (name, base_dir)
		if key not in self._locations:
			self._locations[key] = self._locate(name, base_dir)
		return self._locations[key]

	def _locate(self, name: str, base_dir: str) -> Optional[Location]:
		parts = name.split(".")
		namespace: Optional[Location] = None
		for root in self.roots(base_dir):
			target = os.path.join(root, *parts)
			if os.path.isfile(os.path.join(target, "__init__.py")):
				return Location(name, target, root)
			if os.path.isfile(target + ".py"):
				if len(parts) == 1:
					return Location(name, root, root, target + ".py")
				return Location(".".join(parts[:-1]), os.path.dirname(target), root)
			if namespace is None and has_python_files(target):
				namespace = Location(name, target, root)
		return namespace

	def package_of(self, name: str, base_dir: str, guarded: bool = False) -> Optional[str]:
		"""Map an imported name to the package that provides it.

		Names that cannot be located are returned unchanged, except guarded
		ones, which are dropped.
		"""
		location = self.locate(name, base_dir)
		if location is None and "." in name:
			location = self.locate(name.rsplit(".", 1)[0], base_dir)
		if location is not None:
			return location.package
		if is_stdlib_name(name):
			return name.split(".", 1)[0]
		if guarded:
			return None
		return name

	def resolve(self, identity: str, base_dir: str) -> PackageMetadata:
		key = (identity, base_dir)
		if key not in self._resolved:
			self._resolved[key] = self._resolve(identity, base_dir)
		return self._resolved[key]

	def _resolve(self, identity: str, base_dir: str) -> PackageMetadata:
		name = self.to_dotted(identity, base_dir)
		location = self.locate(name, base_dir)
		if location is None:
			if is_stdlib_name(name):
				# builtin module, nothing on disk
				return PackageMetadata(import_path=name.split(".", 1)[0], is_system_library=True)
			raise ResolutionError(identity, base_dir, "no package or module found")

		package = location.package
		# relative imports in a top-level module have no parent package
		containing = package
		if location.module_file is not None:
			containing = ""
			sources = [location.module_file]
			tests: List[str] = []
			external: List[str] = []
		else:
			sources, tests = self._package_files(location.directory)
			external = self._external_test_files(location.directory)

		imports = [i for i in self._imports(sources, containing, base_dir) if i != package]
		return PackageMetadata(
			import_path=package,
			is_system_library=location.root == self.stdlib_dir,
			imports=imports,
			test_imports=self._imports(tests, containing, base_dir),
			external_test_imports=self._imports(external, f"{package}.{EXTERNAL_TESTS_DIR}", base_dir),
			source_files=sources,
			test_source_files=tests,
			external_test_source_files=external,
		)

	def _package_files(self, directory: str) -> Tuple[List[str], List[str]]:
		sources: List[str] = []
		tests: List[str] = []
		for entry in sorted(os.listdir(directory)):
			path = os.path.join(directory, entry)
			if not entry.endswith(".py") or not os.path.isfile(path):
				continue
			(tests if is_test_file(entry) else sources).append(path)
		return sources, tests

	def _external_test_files(self, directory: str) -> List[str]:
		tests_dir = os.path.join(directory, EXTERNAL_TESTS_DIR)
		files: List[str] = []
		for dirpath, dirnames, filenames in os.walk(tests_dir):
			dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
			for filename in sorted(filenames):
				if filename.endswith(".py"):
					files.append(os.path.join(dirpath, filename))
		return files

	def _imports(self, files: Iterable[str], package: str, base_dir: str) -> List[str]:
		result: List[str] = []
		seen = set()
		for path in files:
			try:
				with open(path, "r", encoding="utf-8") as fh:
					text = fh.read()
				found = parse_imports(text, path, package)
			except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as exc:
				self.diagnostics.error(f"cannot read imports of {path}: {exc}")
				continue
			for name, guarded in found:
				pkg = self.package_of(name, base_dir, guarded)
				if pkg is None or pkg in seen:
					continue
				seen.add(pkg)
				result.append(pkg)
		return result
