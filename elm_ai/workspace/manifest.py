"""
Project manifest (``elm.json``) loading and derivation.

The workspace never compiles against the user's manifest directly. It
holds a derived copy whose source roots point back at the real project
from inside the hidden workspace, plus one private root where
synthesized units live.
"""

from __future__ import annotations

import json
import logging
import posixpath
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from elm_ai.errors import ConfigurationError

LOG = logging.getLogger("workspace.manifest")

TEST_PACKAGE = "elm-explorations/test"
TEST_PACKAGE_VERSION = "2.1.1"

# Standalone manifest used by decoder tests when there is no project manifest.
DEFAULT_TEST_MANIFEST: dict[str, Any] = {
    "type": "application",
    "source-directories": ["src"],
    "elm-version": "0.19.1",
    "dependencies": {
        "direct": {
            "elm/core": "1.0.5",
            "elm/json": "1.1.3",
            "elm/time": "1.0.0",
            "rtfeldman/elm-iso8601-date-strings": "1.1.4",
            "NoRedInk/elm-json-decode-pipeline": "1.0.1",
        },
        "indirect": {
            "elm/parser": "1.1.0",
        },
    },
    "test-dependencies": {
        "direct": {
            TEST_PACKAGE: TEST_PACKAGE_VERSION,
        },
        "indirect": {},
    },
}


class ManifestDescriptor(BaseModel):
    """
    An ``elm.json`` document.

    Only the keys the engine rewrites are modelled; everything else is
    carried through untouched as extra fields.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    source_directories: list[str] = Field(alias="source-directories")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def load_manifest(path: str | Path) -> ManifestDescriptor:
    """
    Read and validate a manifest from disk.

    Raises:
        ConfigurationError: the file is missing, unreadable, not JSON, or
            lacks the keys the engine needs.
    """
    manifest_path = Path(path)
    try:
        raw = manifest_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read manifest {manifest_path}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Manifest {manifest_path} is not valid JSON: {exc}") from exc
    return parse_manifest(data, source=str(manifest_path))


def parse_manifest(data: Any, source: str = "<manifest>") -> ManifestDescriptor:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Manifest {source} must be a JSON object")
    try:
        return ManifestDescriptor.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid manifest {source}: {exc}") from exc


def relativize_source_dir(directory: str, prefix: str) -> str:
    """Re-anchor a source root at *prefix*. Absolute roots are kept as is."""
    if posixpath.isabs(directory) or Path(directory).is_absolute():
        return directory
    return posixpath.normpath(posixpath.join(prefix, directory))


def derive_manifest(
    manifest: ManifestDescriptor,
    prefix: str,
    private_root: str,
) -> ManifestDescriptor:
    """
    Build the workspace-local copy of *manifest*.

    1. every source root is rewritten relative to the workspace (*prefix*
       is the path from the workspace back to the project root)
    2. *private_root* is appended so synthesized units are discoverable

    Dependency maps are copied unchanged: the compiler rejects an
    application manifest whose listed dependencies differ from the solved
    set. The input is left unmodified.
    """
    data = manifest.to_json_dict()
    source_dirs = [relativize_source_dir(d, prefix) for d in manifest.source_directories]
    if private_root not in source_dirs:
        source_dirs.append(private_root)
    data["source-directories"] = source_dirs
    return parse_manifest(data, source="<derived>")


def default_test_manifest() -> ManifestDescriptor:
    return parse_manifest(json.loads(json.dumps(DEFAULT_TEST_MANIFEST)), source="<default>")


def canonical_json(manifest: ManifestDescriptor) -> str:
    """Serialize deterministically; equal manifests give identical bytes."""
    return json.dumps(manifest.to_json_dict(), indent=4, ensure_ascii=False) + "\n"
