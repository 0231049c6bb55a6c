import pytest

from depwalk.builder import Builder, build_dependencies
from depwalk.conditions import any_of, contains, node_count_at_least
from depwalk.config import BuildConfig
from depwalk.diagnostics import CollectingDiagnostics
from depwalk.errors import ResolutionError
from depwalk.filters import RegexMatcher
from depwalk.provider import StaticMetadataProvider


def build(packages, roots, **kwargs):
	provider = StaticMetadataProvider(packages)
	diagnostics = kwargs.pop("diagnostics", None) or CollectingDiagnostics()
	builder = Builder(provider, roots, diagnostics=diagnostics, **kwargs)
	return builder.build(), provider, diagnostics


def test_simple_chain():
	deps, _, _ = build({"a": {"imports": ["b"]}, "b": {"imports": ["c"]}, "c": {}}, ["a"])
	assert deps.forward.to_dict() == {"a": ["b"], "b": ["c"], "c": []}
	assert set(deps.info) == {"a", "b", "c"}
	assert deps.roots == ["a"]
	assert not deps.ignored


def test_import_cycle_is_walked_once():
	deps, provider, _ = build({"a": {"imports": ["b"]}, "b": {"imports": ["a"]}}, ["a"])
	assert deps.forward.to_dict() == {"a": ["b"], "b": ["a"]}
	assert set(deps.info) == {"a", "b"}
	assert provider.calls[("b", ".")] == 1
	assert provider.calls[("a", ".")] == 2


def test_diamond_visits_shared_dependency_once():
	packages = {
		"a": {"imports": ["b", "c"]},
		"b": {"imports": ["d"]},
		"c": {"imports": ["d"]},
		"d": {"imports": ["e"]},
		"e": {},
	}
	deps, provider, _ = build(packages, ["a"])
	assert deps.forward.to_dict() == {"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": ["e"], "e": []}
	assert provider.calls[("e", ".")] == 1


def test_test_import_of_own_package_is_not_a_self_edge():
	packages = {
		"a": {"imports": ["b"], "test_imports": ["a", "b"], "external_test_imports": ["a", "c"]},
		"b": {},
		"c": {},
	}
	deps, _, _ = build(packages, ["a"], include_tests=True)
	assert deps.forward.to_dict() == {"a": ["b", "c"], "b": [], "c": []}


def test_test_imports_need_opt_in():
	packages = {"a": {"test_imports": ["b"], "external_test_imports": ["c"]}, "b": {}, "c": {}}
	deps, provider, _ = build(packages, ["a"])
	assert deps.forward.to_dict() == {"a": []}
	assert provider.calls[("b", ".")] == 0


def test_foreign_pseudo_import_is_dropped():
	deps, provider, diagnostics = build({"a": {"imports": ["C", "b"]}, "b": {}}, ["a"])
	assert deps.forward.to_dict() == {"a": ["b"], "b": []}
	assert "C" not in deps.ignored
	assert "C" not in deps.info
	assert provider.calls[("C", ".")] == 0
	assert not diagnostics.messages


def test_ignore_pattern_wins_over_include():
	packages = {"a": {"imports": ["b"]}, "b": {}}
	deps, _, diagnostics = build(
		packages,
		["a"],
		ignored=[RegexMatcher("^b$")],
		included=[RegexMatcher("^[ab]$")],
	)
	assert deps.forward.to_dict() == {"a": []}
	assert deps.ignored == {"b"}
	assert "b" not in deps.info


def test_rejected_root_is_a_warning():
	packages = {"skip": {"imports": ["keep"]}, "keep": {"imports": ["lib"]}, "lib": {}}
	deps, provider, diagnostics = build(packages, ["skip", "keep"], included=[RegexMatcher("^keep")])
	assert deps.forward.to_dict() == {"keep": []}
	assert deps.ignored == {"skip", "lib"}
	assert deps.roots == ["keep"]
	assert len(diagnostics.warnings) == 1
	assert "skip" in diagnostics.warnings[0]
	# a rejected root is not walked
	assert provider.calls[("keep", ".")] == 1


def test_ignored_packages_are_recorded_once():
	packages = {"a": {"imports": ["x", "b"]}, "b": {"imports": ["x"]}, "x": {}}
	deps, _, _ = build(packages, ["a"], ignored=[RegexMatcher("x")])
	assert deps.ignored == {"x"}
	assert deps.forward.to_dict() == {"a": ["b"], "b": []}


def test_system_libraries():
	packages = {"a": {"imports": ["os"]}, "os": {"is_system_library": True}}
	deps, _, _ = build(packages, ["a"])
	assert deps.forward.to_dict() == {"a": []}
	assert deps.ignored == {"os"}

	deps, _, _ = build(packages, ["a"], include_stdlib=True)
	assert deps.forward.to_dict() == {"a": ["os"], "os": []}


def test_vendored_packages_collapse():
	packages = {
		"app": {"imports": ["app/vendor/lib/x", "lib/x"]},
		"app/vendor/lib/x": {},
		"lib/x": {},
	}
	deps, _, _ = build(packages, ["app"])
	assert deps.forward.to_dict() == {"app": ["lib/x"], "lib/x": []}


def test_resolution_failure_aborts_build():
	with pytest.raises(ResolutionError) as excinfo:
		build({"a": {"imports": ["b", "missing"]}, "b": {}}, ["a"])
	assert excinfo.value.identity == "missing"


def test_early_termination_returns_partial_graph():
	packages = {
		"root": {"imports": ["a"]},
		"a": {"imports": ["b"]},
		"b": {"imports": ["c"]},
		"c": {},
	}
	deps, provider, _ = build(packages, ["root"], termination_conditions=[node_count_at_least(2)])
	assert set(deps.forward) == {"root", "a"}
	assert set(deps.info) == {"root", "a"}
	assert provider.calls[("b", ".")] == 0


def test_termination_abandons_every_level():
	packages = {
		"r1": {"imports": ["a", "x"]},
		"a": {"imports": ["b"]},
		"b": {"imports": ["deep"]},
		"deep": {},
		"x": {},
		"r2": {},
	}
	deps, provider, _ = build(packages, ["r1", "r2"], termination_conditions=[contains("b")])
	assert set(deps.forward) == {"r1", "a", "b"}
	assert deps.forward.to_dict()["a"] == []
	for name in ("deep", "x", "r2"):
		assert provider.calls[(name, ".")] == 0


def test_any_of_conditions():
	packages = {"a": {"imports": ["b"]}, "b": {}}
	never = lambda deps: False
	deps, _, _ = build(packages, ["a"], termination_conditions=[any_of(never, contains("a"))])
	assert set(deps.forward) == {"a"}


def test_lines_of_code(tmp_path):
	src = tmp_path / "a.py"
	src.write_text("x = 1\ny = 2\n")
	test = tmp_path / "test_a.py"
	test.write_text("def test():\n    pass\n\n")
	packages = {"a": {"source_files": [str(src)], "test_source_files": [str(test)]}}

	deps, _, _ = build(packages, ["a"])
	assert deps.info["a"].lines_of_code == 2

	deps, _, _ = build(packages, ["a"], include_tests=True)
	assert deps.info["a"].lines_of_code == 5


def test_unreadable_source_is_not_fatal(tmp_path):
	src = tmp_path / "a.py"
	src.write_text("1\n")
	packages = {"a": {"source_files": [str(src), str(tmp_path / "gone.py")]}}
	deps, _, diagnostics = build(packages, ["a"])
	assert deps.info["a"].lines_of_code == 1
	assert len(diagnostics.errors) == 1


def test_build_dependencies_from_config():
	provider = StaticMetadataProvider({"a": {"imports": ["b", "c"]}, "b": {}, "c": {}})
	config = BuildConfig(roots=["a"], base_dir="/src", ignored=["c*"], pattern_syntax="glob")
	deps = build_dependencies(config, provider=provider, diagnostics=CollectingDiagnostics())
	assert deps.forward.to_dict() == {"a": ["b"], "b": []}
	assert deps.ignored == {"c"}
	assert provider.calls[("a", "/src")] == 1


def test_build_dependencies_max_packages():
	provider = StaticMetadataProvider({"a": {"imports": ["b"]}, "b": {"imports": ["c"]}, "c": {}})
	config = BuildConfig(roots=["a"], max_packages=1)
	deps = build_dependencies(config, provider=provider, diagnostics=CollectingDiagnostics())
	assert set(deps.forward) == {"a"}


class ListSink:
	def __init__(self):
		self.warnings = []
		self.errors = []

	def warning(self, message):
		self.warnings.append(message)

	def error(self, message):
		self.errors.append(message)


def test_any_object_with_warning_and_error_is_a_sink():
	sink = ListSink()
	deps, _, _ = build({"a": {}}, ["a"], ignored=[RegexMatcher("a")], diagnostics=sink)
	assert not deps.forward
	assert sink.warnings == ["ignoring root package 'a'"]
