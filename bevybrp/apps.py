"""Listing and launching the Bevy apps and examples found in search paths."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Iterable

from bevybrp.cargo_detector import BinaryInfo, CargoDetector
from bevybrp.launch_log import (
    append_to_log_file,
    create_log_file,
    open_log_file_for_redirect,
)
from bevybrp.process import launch_detached_process
from bevybrp.scanning import (
    find_required_app,
    find_required_example,
    iter_cargo_project_paths,
)

PROFILE_DEBUG = "debug"
PROFILE_RELEASE = "release"
DEFAULT_PROFILE = PROFILE_DEBUG

_PROFILES = (PROFILE_DEBUG, PROFILE_RELEASE)
_STATUS_RUNNING = "running_in_background"


def _response(message: str, data: dict[str, Any]) -> dict[str, Any]:
    return {"message": message, "data": data}


def _log(message: str) -> None:
    print(message, file=sys.stderr)


def _detectors(search_paths: Iterable[str | Path]) -> Iterable[CargoDetector]:
    for path in iter_cargo_project_paths(search_paths):
        try:
            yield CargoDetector.from_path(path)
        except RuntimeError:
            continue


def launch_bevy_app(
    app_name: str, profile: str = DEFAULT_PROFILE, search_paths: Iterable[str | Path] = ()
) -> dict[str, Any]:
    """Launch a built Bevy app in the background, logging its output to a file.

    Raises NotFoundError when the app is unknown and FileNotFoundError when
    its binary has not been built for *profile*.
    """
    app = find_required_app(app_name, search_paths)
    binary_path = app.binary_path(profile)
    if not binary_path.exists():
        release_flag = " --release" if profile == PROFILE_RELEASE else ""
        raise FileNotFoundError(
            f"Missing binary at {binary_path}. "
            f"Please build the app with 'cargo build{release_flag}' first"
        )

    manifest_dir = app.manifest_path.parent
    _log(f"Launching {app_name} from {manifest_dir}")
    _log(f"Binary path: {binary_path}")
    _log(f"Working directory: {manifest_dir}")
    _log(f"CARGO_MANIFEST_DIR: {manifest_dir}")

    log_file_path = create_log_file(app_name, profile, binary_path, manifest_dir)
    log_file = open_log_file_for_redirect(log_file_path)
    pid = launch_detached_process([binary_path], manifest_dir, log_file, app_name)

    return _response(
        f"Successfully launched '{app_name}' (PID: {pid})",
        {
            "app_name": app_name,
            "pid": pid,
            "working_directory": str(manifest_dir),
            "binary_path": str(binary_path),
            "profile": profile,
            "log_file": str(log_file_path),
            "status": _STATUS_RUNNING,
        },
    )


def launch_bevy_example(
    example_name: str,
    profile: str = DEFAULT_PROFILE,
    search_paths: Iterable[str | Path] = (),
) -> dict[str, Any]:
    """Run a Bevy example with ``cargo run --example`` in the background.

    Raises NotFoundError when the example is unknown.
    """
    example = find_required_example(example_name, search_paths)
    manifest_dir = example.manifest_path.parent

    _log(f"Launching example {example_name} from package {example.package_name}")
    _log(f"Working directory: {manifest_dir}")
    _log(f"Profile: {profile}")

    cmd = ["cargo", "run", "--example", example_name]
    if profile == PROFILE_RELEASE:
        cmd.append("--release")
    cargo_command = " ".join(cmd)

    log_file_path = create_log_file(example_name, profile, cargo_command, manifest_dir)
    append_to_log_file(log_file_path, f"Package: {example.package_name}\n")
    log_file = open_log_file_for_redirect(log_file_path)
    pid = launch_detached_process(cmd, manifest_dir, log_file, example_name)

    return _response(
        f"Successfully launched example '{example_name}' (PID: {pid})",
        {
            "example_name": example_name,
            "pid": pid,
            "package_name": example.package_name,
            "working_directory": str(manifest_dir),
            "profile": profile,
            "log_file": str(log_file_path),
            "status": _STATUS_RUNNING,
            "note": "Cargo will build the example if needed before running",
        },
    )


def _app_entry(app: BinaryInfo) -> dict[str, Any]:
    builds = {
        profile: {
            "path": str(app.binary_path(profile)),
            "built": app.binary_path(profile).exists(),
        }
        for profile in _PROFILES
    }
    return {
        "name": app.name,
        "workspace_root": str(app.workspace_root),
        "manifest_path": str(app.manifest_path),
        "builds": builds,
    }


def _collect_apps(
    search_paths: Iterable[str | Path],
    find: Callable[[CargoDetector], list[BinaryInfo]],
) -> list[dict[str, Any]]:
    return [_app_entry(app) for detector in _detectors(search_paths) for app in find(detector)]


def list_bevy_apps(search_paths: Iterable[str | Path]) -> dict[str, Any]:
    """All Bevy apps in the search paths, with their build state per profile."""
    apps = _collect_apps(search_paths, CargoDetector.find_bevy_apps)
    return _response(f"Found {len(apps)} Bevy apps", {"apps": apps})


def list_brp_apps(search_paths: Iterable[str | Path]) -> dict[str, Any]:
    """All BRP-enabled Bevy apps in the search paths."""
    apps = [
        {**entry, "brp_enabled": True}
        for entry in _collect_apps(search_paths, CargoDetector.find_brp_enabled_apps)
    ]
    return _response(f"Found {len(apps)} BRP-enabled Bevy apps", {"apps": apps})


def list_bevy_examples(search_paths: Iterable[str | Path]) -> dict[str, Any]:
    """All Bevy examples in the search paths."""
    examples = [
        {
            "name": example.name,
            "package_name": example.package_name,
            "manifest_path": str(example.manifest_path),
        }
        for detector in _detectors(search_paths)
        for example in detector.find_bevy_examples()
    ]
    return _response(f"Found {len(examples)} Bevy examples", {"examples": examples})