from __future__ import annotations


class DepwalkError(Exception):
	"""Base class for errors raised while building a dependency graph."""


class ResolutionError(DepwalkError):
	"""An import identity could not be resolved to a package."""

	def __init__(self, identity: str, base_dir: str, reason: str = "") -> None:
		self.identity = identity
		self.base_dir = base_dir
		self.reason = reason
		message = f"unable to resolve {identity!r} from {base_dir!r}"
		if reason:
			message = f"{message}: {reason}"
		super().__init__(message)


class ConfigError(DepwalkError, ValueError):
	pass
