"""FastAPI web application for lockfix."""

from pathlib import PurePosixPath
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from core.config import get_settings
from core.detect import identify
from core.errors import ManifestError, TemporaryError
from core.fs import read_local_file, scratch_copy
from core.models import LOCK_FILE_MAINTENANCE, UpdateArtifact, UpdateConfig
from core.parse_python import parse_pyproject
from core.rye import RyeProcessor, UnknownPackageError, select_upgrades

app = FastAPI(
    title="lockfix",
    description="Refresh rye lock files after dependency upgrades",
    version="0.1.0",
)


class DependenciesRequest(BaseModel):
    """Request model for listing declared dependencies."""
    content: str


class DependencyModel(BaseModel):
    dep_name: Optional[str] = None
    package_name: Optional[str] = None
    dep_type: Optional[str] = None
    group_name: Optional[str] = None
    current_value: Optional[str] = None
    registry_urls: list[str] = []
    skip_reason: Optional[str] = None


class DependenciesResponse(BaseModel):
    manager: str
    dependencies: list[DependencyModel]


class ReconcileRequest(BaseModel):
    """Request model for refreshing the lock files of a manifest."""
    manifest_path: str = "pyproject.toml"
    packages: Optional[list[str]] = None
    maintenance: bool = False
    python_version: Optional[str] = None
    rye_version: Optional[str] = None


class FileChangeModel(BaseModel):
    path: str
    type: str
    contents: Optional[str] = None


class ArtifactErrorModel(BaseModel):
    lock_file: str
    stderr: str


class ReconcileResponse(BaseModel):
    """Response model for lock file reconciliation."""
    has_changes: bool
    files: list[FileChangeModel]
    errors: list[ArtifactErrorModel]


@app.get("/health")
async def health():
    """Report that the service is up."""
    return {"status": "ok"}


@app.post("/api/dependencies", response_model=DependenciesResponse)
async def list_dependencies(request: DependenciesRequest):
    """Parse pyproject content and list the declared dependencies."""
    try:
        content = request.content.strip()
        if not content:
            raise HTTPException(status_code=400, detail="No content provided")

        manifest = parse_pyproject(content)
        deps = RyeProcessor().process(manifest.project, manifest.entries)

        return DependenciesResponse(
            manager=identify(content),
            dependencies=[_dependency_model(dep) for dep in deps],
        )

    except HTTPException:
        # Re-raise HTTP exceptions (don't convert to 500)
        raise
    except ManifestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error parsing manifest: {str(e)}")


@app.post("/api/reconcile", response_model=ReconcileResponse)
async def reconcile(request: ReconcileRequest):
    """Run the lock tool for a manifest under the configured local directory."""
    try:
        manifest_path = PurePosixPath(request.manifest_path)
        if manifest_path.is_absolute() or ".." in manifest_path.parts:
            raise HTTPException(status_code=400, detail="Manifest path must be relative")

        settings = get_settings()
        content = read_local_file(str(manifest_path), settings)
        if content is None:
            raise HTTPException(status_code=404, detail=f"{manifest_path} not found")

        manifest = parse_pyproject(content)
        processor = RyeProcessor(settings)
        deps = processor.process(manifest.project, manifest.entries)

        constraints = {}
        if request.python_version:
            constraints["python"] = request.python_version
        if request.rye_version:
            constraints["rye"] = request.rye_version

        if request.maintenance:
            config = UpdateConfig(update_type=LOCK_FILE_MAINTENANCE, constraints=constraints)
            updated_deps = []
        else:
            config = UpdateConfig(constraints=constraints)
            updated_deps = select_upgrades(deps, request.packages)

        # Callers stage the returned records, the checkout itself is left alone
        with scratch_copy(settings.local_dir) as workdir:
            scratch = RyeProcessor(settings.with_local_dir(str(workdir)))
            results = await scratch.update_artifacts(
                UpdateArtifact(
                    package_file_name=str(manifest_path),
                    updated_deps=updated_deps,
                    config=config,
                    new_package_file_content=content,
                ),
                manifest.project,
            ) or []

        files = [
            FileChangeModel(path=r.file.path, type=r.file.type, contents=r.file.contents)
            for r in results
            if r.file
        ]
        errors = [
            ArtifactErrorModel(lock_file=r.artifact_error.lock_file, stderr=r.artifact_error.stderr)
            for r in results
            if r.artifact_error
        ]
        return ReconcileResponse(has_changes=bool(files), files=files, errors=errors)

    except HTTPException:
        raise
    except TemporaryError as e:
        raise HTTPException(status_code=503, detail=f"Temporary error, retry later: {str(e)}")
    except (ManifestError, UnknownPackageError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error updating lock files: {str(e)}")


def _dependency_model(dep) -> DependencyModel:
    return DependencyModel(
        dep_name=dep.dep_name,
        package_name=dep.package_name,
        dep_type=dep.dep_type.value if dep.dep_type else None,
        group_name=dep.group_name,
        current_value=dep.current_value,
        registry_urls=dep.registry_urls,
        skip_reason=dep.skip_reason,
    )
