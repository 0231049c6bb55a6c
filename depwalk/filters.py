from __future__ import annotations

import fnmatch
import re
from typing import Iterable, List, Protocol, Sequence

from .errors import ConfigError


class Matcher(Protocol):
	def matches(self, value: str) -> bool:
		...


class RegexMatcher:
	"""Unanchored regular expression, tested with re.search."""

	def __init__(self, pattern: str) -> None:
		try:
			self._regex = re.compile(pattern)
		except re.error as exc:
			raise ConfigError(f"invalid pattern {pattern!r}: {exc}") from exc
		self.pattern = pattern

	def matches(self, value: str) -> bool:
		return self._regex.search(value) is not None

	def __repr__(self) -> str:
		return f"RegexMatcher({self.pattern!r})"


class GlobMatcher:
	def __init__(self, pattern: str) -> None:
		self.pattern = pattern

	def matches(self, value: str) -> bool:
		return fnmatch.fnmatchcase(value, self.pattern)

	def __repr__(self) -> str:
		return f"GlobMatcher({self.pattern!r})"


PATTERN_SYNTAXES = {
	"regex": RegexMatcher,
	"glob": GlobMatcher,
}


def compile_patterns(patterns: Iterable[str], syntax: str = "regex") -> List[Matcher]:
	factory = PATTERN_SYNTAXES.get(syntax)
	if factory is None:
		raise ConfigError(f"unknown pattern syntax {syntax!r}")
	return [factory(p) for p in patterns]


def matches_any(pkg: str, matchers: Iterable[Matcher]) -> bool:
	return any(m.matches(pkg) for m in matchers)


def is_accepted(
	pkg: str,
	is_system_library: bool,
	ignored: Sequence[Matcher],
	included: Sequence[Matcher],
	include_system_library: bool,
) -> bool:
	"""Decide whether a canonical package takes part in the graph.

	Ignore patterns win over everything, system-library packages are dropped
	unless requested, and an empty include list accepts the rest.
	"""
	if matches_any(pkg, ignored):
		return False
	if is_system_library and not include_system_library:
		return False
	if not included:
		return True
	return matches_any(pkg, included)
