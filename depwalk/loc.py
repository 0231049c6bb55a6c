from __future__ import annotations

from typing import Iterable, Optional

from .diagnostics import Diagnostics, LoggingDiagnostics


BUFFER_SIZE = 32 * 1024


def count_lines(path: str) -> int:
	"""Count newline bytes in a file. Raises OSError when it cannot be read."""
	count = 0
	with open(path, "rb") as fh:
		while True:
			chunk = fh.read(BUFFER_SIZE)
			if not chunk:
				return count
			count += chunk.count(b"\n")


def lines_of_code(paths: Iterable[str], diagnostics: Optional[Diagnostics] = None) -> int:
	# Unreadable files count as zero
	diagnostics = diagnostics or LoggingDiagnostics()
	total = 0
	for path in paths:
		try:
			total += count_lines(path)
		except OSError as exc:
			diagnostics.error(f"cannot count lines of {path}: {exc}")
			continue
	return total
