"""Workspace provisioning: hidden directory tree and derived manifest."""

from __future__ import annotations

from elm_ai.workspace.manifest import (
    ManifestDescriptor,
    canonical_json,
    derive_manifest,
    load_manifest,
)
from elm_ai.workspace.provisioner import Workspace, ensure_workspace, write_if_changed

__all__ = [
    "ManifestDescriptor",
    "Workspace",
    "canonical_json",
    "derive_manifest",
    "ensure_workspace",
    "load_manifest",
    "write_if_changed",
]
