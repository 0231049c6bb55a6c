from __future__ import annotations

import logging
from typing import List, Optional, Protocol


logger = logging.getLogger(__name__)


class Diagnostics(Protocol):
	"""Sink for advisory messages emitted while a graph is being built.

	warning() is used for rejected root packages and error() for source files
	that could not be read. Neither affects the result.
	"""

	def warning(self, message: str) -> None:
		...

	def error(self, message: str) -> None:
		...


class LoggingDiagnostics:
	def __init__(self, log: Optional[logging.Logger] = None) -> None:
		self.log = log or logger

	def warning(self, message: str) -> None:
		self.log.warning(message)

	def error(self, message: str) -> None:
		self.log.error(message)


class CollectingDiagnostics:
	"""Keeps every message; optionally forwards to another sink."""

	def __init__(self, forward: Optional[Diagnostics] = None) -> None:
		self.warnings: List[str] = []
		self.errors: List[str] = []
		self.forward = forward

	def warning(self, message: str) -> None:
		self.warnings.append(message)
		if self.forward is not None:
			self.forward.warning(message)

	def error(self, message: str) -> None:
		self.errors.append(message)
		if self.forward is not None:
			self.forward.error(message)

	@property
	def messages(self) -> List[str]:
		return self.warnings + self.errors
