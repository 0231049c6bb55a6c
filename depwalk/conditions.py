from __future__ import annotations

from typing import Callable

from .model import Dependencies


Condition = Callable[[Dependencies], bool]


def contains(pkg: str) -> Condition:
	"""Stop once pkg has been added to the graph."""
	def condition(deps: Dependencies) -> bool:
		return deps.forward.has(pkg)
	return condition


def node_count_at_least(count: int) -> Condition:
	def condition(deps: Dependencies) -> bool:
		return len(deps.forward) >= count
	return condition


def any_of(*conditions: Condition) -> Condition:
	def condition(deps: Dependencies) -> bool:
		return any(c(deps) for c in conditions)
	return condition
