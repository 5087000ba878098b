"""Locating Cargo projects and the Bevy targets inside them."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Iterator, TypeVar

from bevybrp.cargo_detector import BinaryInfo, CargoDetector, ExampleInfo

_T = TypeVar("_T", BinaryInfo, ExampleInfo)


class NotFoundError(LookupError):
    """A requested app or example is not in any search path."""


def iter_cargo_project_paths(search_paths: Iterable[str | Path]) -> Iterator[Path]:
    """Yield each search path holding a Cargo.toml, then its project subdirectories.

    Hidden directories and ``target`` directories are skipped.
    """
    for root in map(Path, search_paths):
        if (root / "Cargo.toml").exists():
            yield root
        try:
            entries = sorted(root.iterdir())
        except OSError:
            continue
        for path in entries:
            if not (path.is_dir() and (path / "Cargo.toml").exists()):
                continue
            if path.name.startswith(".") or path.name == "target":
                continue
            yield path


def _find_first(
    name: str,
    search_paths: Iterable[str | Path],
    collect: Callable[[CargoDetector], list[_T]],
) -> _T | None:
    for path in iter_cargo_project_paths(search_paths):
        try:
            detector = CargoDetector.from_path(path)
        except RuntimeError:
            continue
        match = next((item for item in collect(detector) if item.name == name), None)
        if match is not None:
            return match
    return None


def find_app_by_name(app_name: str, search_paths: Iterable[str | Path]) -> BinaryInfo | None:
    """The first Bevy app called *app_name*, or None."""
    return _find_first(app_name, search_paths, CargoDetector.find_bevy_apps)


def find_example_by_name(
    example_name: str, search_paths: Iterable[str | Path]
) -> ExampleInfo | None:
    """The first Bevy example called *example_name*, or None."""
    return _find_first(example_name, search_paths, CargoDetector.find_bevy_examples)


def find_required_app(app_name: str, search_paths: Iterable[str | Path]) -> BinaryInfo:
    """Like find_app_by_name, but raise NotFoundError when there is no such app."""
    app = find_app_by_name(app_name, search_paths)
    if app is None:
        raise NotFoundError(f"Could not find Bevy app '{app_name}' in search paths")
    return app


def find_required_example(
    example_name: str, search_paths: Iterable[str | Path]
) -> ExampleInfo:
    """Like find_example_by_name, but raise NotFoundError when there is no such example."""
    example = find_example_by_name(example_name, search_paths)
    if example is None:
        raise NotFoundError(
            f"Could not find Bevy example '{example_name}' in search paths"
        )
    return example