import json
import subprocess
import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

from bevybrp.apps import (
    launch_bevy_app,
    launch_bevy_example,
    list_bevy_apps,
    list_bevy_examples,
    list_brp_apps,
)
from bevybrp.scanning import NotFoundError


def _package(root: Path, name: str, features=None, bins=(), examples=(), bevy=True):
    deps = [{"name": "bevy", "features": features or []}] if bevy else []
    targets = [{"name": b, "kind": ["bin"]} for b in bins]
    targets += [{"name": e, "kind": ["example"]} for e in examples]
    return {
        "id": f"{name}-id",
        "name": name,
        "manifest_path": str(root / "Cargo.toml"),
        "dependencies": deps,
        "targets": targets,
    }


@pytest.fixture
def project(tmp_path, monkeypatch):
    root = tmp_path / "ws"
    root.mkdir()
    (root / "Cargo.toml").write_text("[package]\n")
    logs = tmp_path / "logs"
    logs.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(logs))

    metadata = {}

    def fake_run(args, cwd=None, **kwargs):
        if cwd in metadata:
            return subprocess.CompletedProcess(args, 0, stdout=json.dumps(metadata[cwd]), stderr="")
        return subprocess.CompletedProcess(args, 1, stdout="", stderr="no metadata")

    monkeypatch.setattr(subprocess, "run", fake_run)

    launched = []

    def fake_popen(args, **kwargs):
        launched.append((args, kwargs))
        return SimpleNamespace(pid=4321)

    monkeypatch.setattr(subprocess, "Popen", fake_popen)

    def set_packages(*packages):
        metadata[str(root)] = {
            "workspace_root": str(root),
            "workspace_members": [p["id"] for p in packages],
            "packages": list(packages),
        }

    return SimpleNamespace(root=root, set_packages=set_packages, launched=launched, logs=logs)


def test_launch_app_unknown_raises(project):
    project.set_packages(_package(project.root, "mygame", bins=["game"]))
    with pytest.raises(NotFoundError):
        launch_bevy_app("other", "debug", [project.root])


def test_launch_app_missing_binary_mentions_release_flag(project):
    project.set_packages(_package(project.root, "mygame", bins=["game"]))
    with pytest.raises(FileNotFoundError, match="--release"):
        launch_bevy_app("game", "release", [project.root])


def test_launch_app_starts_binary(project):
    project.set_packages(_package(project.root, "mygame", bins=["game"]))
    binary = project.root / "target" / "debug" / "game"
    binary.parent.mkdir(parents=True)
    binary.write_text("")

    result = launch_bevy_app("game", "debug", [project.root])
    data = result["data"]
    assert data["pid"] == 4321
    assert data["binary_path"] == str(binary)
    assert data["working_directory"] == str(project.root)
    assert data["status"] == "running_in_background"
    assert "4321" in result["message"]

    args, kwargs = project.launched[0]
    assert args == [str(binary)]
    assert kwargs["cwd"] == str(project.root)
    assert kwargs["env"]["CARGO_MANIFEST_DIR"] == str(project.root)

    log_text = Path(data["log_file"]).read_text()
    assert Path(data["log_file"]).parent == project.logs
    assert "App: game" in log_text
    assert f"Binary: {binary}" in log_text


def test_launch_example_release(project):
    project.set_packages(_package(project.root, "mygame", examples=["demo"]))
    result = launch_bevy_example("demo", "release", [project.root])
    data = result["data"]
    assert data["package_name"] == "mygame"
    assert data["profile"] == "release"
    args, _ = project.launched[0]
    assert args == ["cargo", "run", "--example", "demo", "--release"]
    log_text = Path(data["log_file"]).read_text()
    assert "Binary: cargo run --example demo --release" in log_text
    assert log_text.endswith("Package: mygame\n")


def test_launch_example_debug_has_no_release_flag(project):
    project.set_packages(_package(project.root, "mygame", examples=["demo"]))
    result = launch_bevy_example("demo", "debug", [project.root])
    args, _ = project.launched[0]
    assert args == ["cargo", "run", "--example", "demo"]
    assert "Binary: cargo run --example demo\n" in Path(result["data"]["log_file"]).read_text()


def test_launch_example_unknown_raises(project):
    project.set_packages(_package(project.root, "mygame", examples=["demo"]))
    with pytest.raises(NotFoundError):
        launch_bevy_example("missing", "debug", [project.root])


def test_list_apps_reports_builds(project):
    project.set_packages(
        _package(project.root, "mygame", bins=["game"]),
        _package(project.root, "tool", bins=["cli"], bevy=False),
    )
    (project.root / "target" / "release").mkdir(parents=True)
    (project.root / "target" / "release" / "game").write_text("")

    result = list_bevy_apps([project.root])
    apps = result["data"]["apps"]
    assert [a["name"] for a in apps] == ["game"]
    assert apps[0]["builds"]["release"]["built"] is True
    assert apps[0]["builds"]["debug"]["built"] is False
    assert apps[0]["workspace_root"] == str(project.root)
    assert result["message"] == f"Found {len(apps)} Bevy apps"


def test_list_apps_skips_failing_projects(tmp_path, project):
    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "Cargo.toml").write_text("")
    result = list_bevy_apps([broken])
    assert result["data"]["apps"] == []


def test_list_brp_apps_requires_plugin_import(project):
    project.set_packages(
        _package(project.root, "mygame", bins=["game"]),
        _package(project.root, "bevy_brp_mcp", bins=["server"]),
    )
    assert list_brp_apps([project.root])["data"]["apps"] == []

    src = project.root / "src"
    src.mkdir()
    (src / "main.rs").write_text("use bevy::remote::RemotePlugin;\n")
    apps = list_brp_apps([project.root])["data"]["apps"]
    assert [a["name"] for a in apps] == ["game"]
    assert apps[0]["brp_enabled"] is True


def test_list_examples(project):
    project.set_packages(_package(project.root, "mygame", bins=["game"], examples=["a", "b"]))
    result = list_bevy_examples([project.root])
    examples = result["data"]["examples"]
    assert [e["name"] for e in examples] == ["a", "b"]
    assert all(e["package_name"] == "mygame" for e in examples)
    assert examples[0]["manifest_path"] == str(project.root / "Cargo.toml")
    assert result["message"] == f"Found {len(examples)} Bevy examples"