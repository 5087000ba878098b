"""Detection of Bevy applications and examples in Cargo projects."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Mapping

_SELF_PACKAGE_NAME = "bevy_brp_mcp"

_REMOTE_IMPORT = "use bevy::remote::RemotePlugin"
_REMOTE_GROUP_IMPORT = "use bevy::remote::{"
_REMOTE_PLUGIN = "RemotePlugin"
_EXTRAS_IMPORT = "use bevy_brp_extras::BrpExtrasPlugin"
_EXTRAS_GROUP_IMPORT = "use bevy_brp_extras::{"
_EXTRAS_PLUGIN = "BrpExtrasPlugin"


@dataclass(frozen=True)
class BinaryInfo:
    """A binary target of a workspace member."""

    name: str
    workspace_root: Path
    manifest_path: Path

    def binary_path(self, profile: str) -> Path:
        """Path of the built binary for the given profile."""
        return self.workspace_root / "target" / profile / self.name


@dataclass(frozen=True)
class ExampleInfo:
    """An example target of a workspace member."""

    name: str
    package_name: str
    manifest_path: Path


def load_metadata(path: str | Path) -> dict[str, Any]:
    """Run ``cargo metadata`` in *path* and return the parsed document.

    Raises RuntimeError when cargo cannot be run or fails.
    """
    try:
        completed = subprocess.run(
            ["cargo", "metadata", "--format-version", "1"],
            cwd=str(path),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise RuntimeError(f"Failed to execute cargo metadata: {exc}") from exc
    if completed.returncode != 0:
        raise RuntimeError(
            f"Failed to execute cargo metadata: {completed.stderr.strip()}"
        )
    try:
        return json.loads(completed.stdout)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Failed to execute cargo metadata: {exc}") from exc


def file_uses_brp_plugins(file_path: str | Path) -> bool:
    """Whether a source file imports ``RemotePlugin`` or ``BrpExtrasPlugin``."""
    try:
        content = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False
    has_remote = _REMOTE_IMPORT in content or (
        _REMOTE_GROUP_IMPORT in content and _REMOTE_PLUGIN in content
    )
    has_extras = _EXTRAS_IMPORT in content or (
        _EXTRAS_GROUP_IMPORT in content and _EXTRAS_PLUGIN in content
    )
    return has_remote or has_extras


def directory_uses_brp_plugins(directory: str | Path) -> bool:
    """Whether any ``.rs`` file below *directory* uses a BRP plugin."""
    try:
        entries = list(Path(directory).iterdir())
    except OSError:
        return False
    for entry in entries:
        if entry.is_dir():
            if directory_uses_brp_plugins(entry):
                return True
        elif entry.suffix == ".rs" and file_uses_brp_plugins(entry):
            return True
    return False


def _depends_on_bevy(package: Mapping[str, Any]) -> bool:
    return any(dep.get("name") == "bevy" for dep in package.get("dependencies", []))


def _has_bevy_remote_feature(package: Mapping[str, Any]) -> bool:
    for dep in package.get("dependencies", []):
        if dep.get("name") != "bevy":
            continue
        features = dep.get("features") or []
        # No explicit features: assume workspace inheritance, verified by source scan.
        if not features or "bevy_remote" in features:
            return True
    return False


def _uses_brp_plugins(package: Mapping[str, Any]) -> bool:
    manifest = package.get("manifest_path")
    if not manifest:
        return False
    src_dir = Path(manifest).parent / "src"
    if not src_dir.exists():
        return False
    return directory_uses_brp_plugins(src_dir)


def _has_brp_support(package: Mapping[str, Any]) -> bool:
    return _has_bevy_remote_feature(package) and _uses_brp_plugins(package)


def _targets_of_kind(package: Mapping[str, Any], kind: str) -> Iterator[Mapping[str, Any]]:
    return (t for t in package.get("targets", []) if kind in t.get("kind", []))


class CargoDetector:
    """Finds binary and example targets in a Cargo project or workspace."""

    def __init__(self, metadata: Mapping[str, Any]) -> None:
        self._metadata = metadata
        self._members = set(metadata.get("workspace_members", []))
        self._workspace_root = Path(metadata.get("workspace_root", ""))

    @classmethod
    def from_path(cls, path: str | Path) -> "CargoDetector":
        """Create a detector from ``cargo metadata`` run in *path*."""
        return cls(load_metadata(path))

    def _member_packages(self) -> Iterator[Mapping[str, Any]]:
        return (
            p for p in self._metadata.get("packages", []) if p.get("id") in self._members
        )

    def _binaries(self, package: Mapping[str, Any]) -> list[BinaryInfo]:
        return [
            BinaryInfo(
                name=target["name"],
                workspace_root=self._workspace_root,
                manifest_path=Path(package["manifest_path"]),
            )
            for target in _targets_of_kind(package, "bin")
        ]

    def find_bevy_apps(self) -> list[BinaryInfo]:
        """All binaries of workspace members that depend on bevy."""
        return [
            app
            for package in self._member_packages()
            if _depends_on_bevy(package)
            for app in self._binaries(package)
        ]

    def find_bevy_examples(self) -> list[ExampleInfo]:
        """All examples of workspace members that depend on bevy."""
        return [
            ExampleInfo(
                name=target["name"],
                package_name=package["name"],
                manifest_path=Path(package["manifest_path"]),
            )
            for package in self._member_packages()
            if _depends_on_bevy(package)
            for target in _targets_of_kind(package, "example")
        ]

    def find_brp_enabled_apps(self) -> list[BinaryInfo]:
        """All binaries of workspace members that have BRP support."""
        return [
            app
            for package in self._member_packages()
            if package.get("name") != _SELF_PACKAGE_NAME and _has_brp_support(package)
            for app in self._binaries(package)
        ]