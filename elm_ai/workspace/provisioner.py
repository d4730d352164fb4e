"""
Workspace provisioner: the hidden directory tree the oracle runs in.

Layout under ``<project>/<workspace_dir>``::

    elm.json        derived manifest
    src/            workspace-local sources
    tests/          synthesized test units
    .elm-ai/        private synthesized sources

``ensure_workspace`` is cheap enough to call before every invocation:
it only creates directories that are missing. Files are only rewritten
when their content changes, so the compiler's build cache stays valid
across rounds.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from elm_ai.workspace.manifest import (
    canonical_json,
    default_test_manifest,
    derive_manifest,
    load_manifest,
)

LOG = logging.getLogger("workspace.provisioner")

MANIFEST_NAME = "elm.json"
PRIVATE_ROOT = ".elm-ai"


def _write_atomic(path: Path, content: str) -> None:
    """Write via a sibling temp file and rename, so readers never see a partial file."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_if_changed(path: str | Path, content: str) -> bool:
    """
    Write *content* to *path* unless the file already holds exactly that.

    Returns True when a write happened.
    """
    target = Path(path)
    if target.is_file():
        try:
            if target.read_text(encoding="utf-8") == content:
                LOG.debug("Unchanged, skipping write: %s", target)
                return False
        except (OSError, UnicodeDecodeError):
            LOG.debug("Could not read %s for comparison; rewriting", target)
    target.parent.mkdir(parents=True, exist_ok=True)
    _write_atomic(target, content)
    return True


@dataclass(frozen=True)
class Workspace:
    """Handle on a provisioned workspace. Pass it to every operation."""

    project_root: Path
    root: Path

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_NAME

    @property
    def src_dir(self) -> Path:
        return self.root / "src"

    @property
    def tests_dir(self) -> Path:
        return self.root / "tests"

    @property
    def private_dir(self) -> Path:
        return self.root / PRIVATE_ROOT

    @property
    def project_prefix(self) -> str:
        """Relative path from the workspace root back to the project root."""
        return Path(os.path.relpath(self.project_root, self.root)).as_posix()

    def materialize_manifest(self, source_manifest_path: str | Path) -> bool:
        """
        Derive the workspace manifest from the project's real one.

        Raises ConfigurationError if the source manifest cannot be loaded.
        Returns True when the workspace manifest was (re)written.
        """
        manifest = load_manifest(source_manifest_path)
        derived = derive_manifest(manifest, self.project_prefix, PRIVATE_ROOT)
        written = write_if_changed(self.manifest_path, canonical_json(derived))
        if written:
            LOG.info("Wrote derived manifest %s", self.manifest_path)
        return written

    def materialize_default_manifest(self) -> bool:
        """Write the standalone decoder-test manifest."""
        written = write_if_changed(self.manifest_path, canonical_json(default_test_manifest()))
        if written:
            LOG.info("Wrote default test manifest %s", self.manifest_path)
        return written

    def write_source(self, relative_path: str | Path, text: str) -> Path:
        """Write a synthesized file under the workspace root; returns its absolute path."""
        target = self.root / relative_path
        write_if_changed(target, text)
        return target


def ensure_workspace(project_root: str | Path, workspace_dir: str = "elm-stuff/elm-ai") -> Workspace:
    """Create the workspace tree if needed. Idempotent."""
    project = Path(project_root).resolve()
    workspace = Workspace(project_root=project, root=project / workspace_dir)
    for directory in (workspace.root, workspace.src_dir, workspace.tests_dir, workspace.private_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return workspace
