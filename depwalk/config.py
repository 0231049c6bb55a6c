from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .conditions import Condition, contains, node_count_at_least
from .filters import Matcher, compile_patterns


class BuildConfig(BaseModel):
	"""Everything needed to build one dependency graph."""

	base_dir: str = "."
	roots: List[str] = Field(min_length=1)
	ignored: List[str] = []
	included: List[str] = []
	pattern_syntax: Literal["regex", "glob"] = "regex"
	include_tests: bool = False
	include_stdlib: bool = False
	search_paths: List[str] = []
	max_packages: Optional[int] = Field(default=None, ge=1)
	stop_at: Optional[str] = None

	def ignore_matchers(self) -> List[Matcher]:
		return compile_patterns(self.ignored, self.pattern_syntax)

	def include_matchers(self) -> List[Matcher]:
		return compile_patterns(self.included, self.pattern_syntax)

	def termination_conditions(self) -> List[Condition]:
		conditions: List[Condition] = []
		if self.stop_at:
			conditions.append(contains(self.stop_at))
		if self.max_packages is not None:
			conditions.append(node_count_at_least(self.max_packages))
		return conditions
