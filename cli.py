from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn
from pydantic import ValidationError

from depwalk.config import BuildConfig
from depwalk.errors import DepwalkError
from depwalk.report import build_report


def config_from_args(args: argparse.Namespace) -> BuildConfig:
	return BuildConfig(
		base_dir=args.base,
		roots=args.roots,
		ignored=args.ignore,
		included=args.include,
		pattern_syntax="glob" if args.glob else "regex",
		include_tests=args.tests,
		include_stdlib=args.stdlib,
		search_paths=args.search_path,
		max_packages=args.max_packages,
		stop_at=args.stop_at,
	)


def cmd_analyze(args: argparse.Namespace) -> int:
	try:
		config = config_from_args(args)
		report = build_report(config, to=args.to, all_paths=args.all_paths)
	except (DepwalkError, ValidationError) as exc:
		print(f"error: {exc}", file=sys.stderr)
		return 1
	print(report.model_dump_json(indent=2))
	return 0


def cmd_serve(args: argparse.Namespace) -> int:
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
	return 0


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(prog="depwalk")
	parser.add_argument("-v", "--verbose", action="store_true", help="Log every visited package")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Build the dependency graph of root packages and print it as JSON")
	pa.add_argument("roots", nargs="+", help="Root packages (dotted names or ./relative/dirs)")
	pa.add_argument("--base", default=".", help="Base directory for resolving imports")
	pa.add_argument("--ignore", action="append", default=[], help="Ignore packages matching this pattern")
	pa.add_argument("--include", action="append", default=[], help="Only include packages matching this pattern")
	pa.add_argument("--glob", action="store_true", help="Treat patterns as shell globs instead of regular expressions")
	pa.add_argument("--tests", action="store_true", help="Follow test imports and count test files")
	pa.add_argument("--stdlib", action="store_true", help="Include standard library packages")
	pa.add_argument("--search-path", action="append", default=[], help="Extra directory to resolve imports from")
	pa.add_argument("--max-packages", type=int, default=None, help="Stop once this many packages are in the graph")
	pa.add_argument("--stop-at", default=None, help="Stop as soon as this package is reached")
	pa.add_argument("--to", default=None, help="Report the shortest path from each root to this package")
	pa.add_argument("--all-paths", action="store_true", help="With --to, report every path instead of the shortest")
	pa.set_defaults(func=cmd_analyze)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default="127.0.0.1")
	ps.add_argument("--port", type=int, default=8000)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)

	args = parser.parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
		stream=sys.stderr,
	)
	return args.func(args)


if __name__ == "__main__":
	sys.exit(main())
