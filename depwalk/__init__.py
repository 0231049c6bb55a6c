"""depwalk: filtered, cycle-safe package dependency graphs.

Modules:
- canonical.py: Package identity canonicalization (vendor segments).
- filters.py: Ignore/include matchers and the acceptance decision.
- graph.py: Graph and set stores plus path queries.
- model.py: Result and metadata data structures.
- provider.py: Metadata providers (in-memory and Python source trees).
- builder.py: The recursive graph builder.
- conditions.py: Termination conditions.
- loc.py: Line counting.
"""

from .builder import Builder, build_dependencies
from .canonical import canonicalize, strip_vendor
from .config import BuildConfig
from .diagnostics import CollectingDiagnostics, Diagnostics, LoggingDiagnostics
from .errors import ConfigError, DepwalkError, ResolutionError
from .graph import Graph, Node, PackageSet
from .model import Dependencies, DependenciesReport, DependencyInfo, PackageMetadata
from .provider import MetadataProvider, PythonMetadataProvider, StaticMetadataProvider

__all__ = [
	"Builder",
	"BuildConfig",
	"CollectingDiagnostics",
	"ConfigError",
	"Dependencies",
	"DependenciesReport",
	"DependencyInfo",
	"DepwalkError",
	"Diagnostics",
	"Graph",
	"LoggingDiagnostics",
	"MetadataProvider",
	"Node",
	"PackageMetadata",
	"PackageSet",
	"PythonMetadataProvider",
	"ResolutionError",
	"StaticMetadataProvider",
	"build_dependencies",
	"canonicalize",
	"strip_vendor",
]
