from __future__ import annotations

from typing import Tuple


VENDOR_SEGMENTS: Tuple[str, ...] = ("vendor", "_vendor")
SEPARATORS: Tuple[str, ...] = ("/", ".")


def _markers() -> Tuple[str, ...]:
	return tuple(
		f"{left}{segment}{right}"
		for segment in VENDOR_SEGMENTS
		for left in SEPARATORS
		for right in SEPARATORS
	)


_MARKERS = _markers()


def canonicalize(identity: str) -> str:
	"""Return the identity with everything up to its last vendor segment removed.

	"proj/internal_copy/vendor/lib/x" -> "lib/x", "pip._vendor.requests" -> "requests".
	"""
	best_index = -1
	best_marker = ""
	for marker in _MARKERS:
		index = identity.rfind(marker)
		if index > best_index:
			best_index = index
			best_marker = marker
	if best_index == -1:
		return identity
	return identity[best_index + len(best_marker):]


def strip_vendor(identity: str) -> Tuple[str, bool]:
	stripped = canonicalize(identity)
	return stripped, stripped != identity
