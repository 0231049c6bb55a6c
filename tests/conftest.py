from textwrap import dedent

import pytest


def write(path, text=""):
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(dedent(text))
	return path


@pytest.fixture
def project(tmp_path):
	"""A small source tree plus a fake standard library next to it."""
	root = tmp_path / "proj"
	write(
		root / "app" / "__init__.py",
		"""
		from . import util
		import lib
		import os

		try:
			import missing_mod
		except ImportError:
			missing_mod = None
		""",
	)
	write(root / "app" / "util.py", "from app.models import User\n")
	write(root / "app" / "models" / "__init__.py", "import json\n\nUser = dict\n")
	write(root / "app" / "test_app.py", "import app\nimport lib\n")
	write(root / "app" / "tests" / "test_ext.py", "from app import util\n")
	write(root / "lib.py", "import app.models\n")

	stdlib = tmp_path / "stdlib"
	write(stdlib / "os.py", "import sys\n")
	return root, stdlib
