from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI, HTTPException

from depwalk.config import BuildConfig
from depwalk.errors import ConfigError, ResolutionError
from depwalk.model import DependenciesReport
from depwalk.report import build_report


app = FastAPI(title="depwalk")


class DependenciesRequest(BuildConfig):
	to: Optional[str] = None
	all_paths: bool = False


@app.post("/dependencies", response_model=DependenciesReport)
def dependencies(req: DependenciesRequest) -> DependenciesReport:
	if not os.path.isdir(req.base_dir):
		raise HTTPException(status_code=400, detail=f"Invalid base_dir: {req.base_dir}")

	config = BuildConfig(**req.model_dump(exclude={"to", "all_paths"}))
	try:
		return build_report(config, to=req.to, all_paths=req.all_paths)
	except ConfigError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	except ResolutionError as exc:
		raise HTTPException(status_code=422, detail=str(exc)) from exc


def create_app() -> FastAPI:
	return app
