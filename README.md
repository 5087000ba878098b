# bevybrp

A Python library for working with Bevy applications. It can do four things:

- find Bevy apps and examples in Cargo projects
- start them in the background with their output captured in a log file
- check whether a running app answers on the Bevy Remote Protocol (BRP)
- shut an app down

## Installation

```
pip install .
```

To install and run the test suite:

```
pip install ".[test]"
pytest
```

`cargo` must be on your `PATH`. Project discovery runs `cargo metadata --format-version 1`. Examples are started with `cargo run --example`.

## Discovering projects

`bevybrp.scanning.iter_cargo_project_paths(search_paths)` yields directories that hold a `Cargo.toml`:

- the search path itself, when it holds one
- its immediate subdirectories that hold one, in sorted order

Hidden directories and directories named `target` are skipped. A search path that cannot be read is passed over.

`bevybrp.cargo_detector.CargoDetector.from_path(path)` runs `cargo metadata` in `path`. It raises `RuntimeError` if cargo cannot be run or fails. You can also build a detector directly from a parsed metadata document with `CargoDetector(metadata)`. Only workspace members are considered:

- `find_bevy_apps()` returns a `BinaryInfo` for each binary target of a member that depends on `bevy`.
- `find_bevy_examples()` returns an `ExampleInfo` for each example target of such a member.
- `find_brp_enabled_apps()` returns the binaries of members that meet both conditions:
  - Their `bevy` dependency lists the `bevy_remote` feature, or lists no features at all.
  - Some `.rs` file under their `src/` directory imports `RemotePlugin` from `bevy::remote` or `BrpExtrasPlugin` from `bevy_brp_extras`.

  A package named `bevy_brp_mcp` is always left out.

The source scan is available on its own through `directory_uses_brp_plugins(directory)` and `file_uses_brp_plugins(file_path)`.

`BinaryInfo.binary_path(profile)` returns the expected build location, `<workspace_root>/target/<profile>/<name>`.

`bevybrp.scanning` also provides name lookups across search paths:

- `find_app_by_name` and `find_example_by_name` return the first match, or `None`.
- `find_required_app` and `find_required_example` return the first match, or raise `scanning.NotFoundError`.

Projects whose metadata cannot be read are skipped.

## Listing and launching

```python
from pathlib import Path
from bevybrp import apps

roots = [Path("~/code").expanduser()]
print(apps.list_bevy_apps(roots))
print(apps.list_brp_apps(roots))
print(apps.list_bevy_examples(roots))

apps.launch_bevy_app("my_game", "debug", roots)
apps.launch_bevy_example("breakout", "release", roots)
```

Every function in `bevybrp.apps` returns a dict of the form `{"message": ..., "data": {...}}`:

- App listings give each app's name, workspace root and manifest path. They also give a `builds` entry for the `debug` and `release` profiles, holding the binary path and whether that binary exists.
- BRP app listings also mark each app with `"brp_enabled": True`.

The profile defaults to `apps.DEFAULT_PROFILE` (`"debug"`).

`launch_bevy_app` needs the app binary to be built already. If it is not built, the function raises `FileNotFoundError`, and the message names the `cargo build` command to run. `launch_bevy_example` runs `cargo run --example <name>`, adding `--release` for the release profile, so cargo builds the example first if it needs to.

Launched processes run detached:

- stdin is closed.
- stdout and stderr go to a log file in the system temp directory, named `bevy_brp_mcp_<name>_<millis>.log`. The file starts with a header that records the app, profile, binary and working directory.
- The working directory and `CARGO_MANIFEST_DIR` are set to the directory that holds the package's `Cargo.toml`.

The result contains the PID and the log file path.

You can also use the lower-level helpers directly:

- `bevybrp.launch_log`: `create_log_file`, `open_log_file_for_redirect` and `append_to_log_file`. These raise `LogFileError`.
- `bevybrp.process.launch_detached_process`, which raises `ProcessLaunchError`.

## Talking to BRP

```python
from bevybrp import brp

brp.check_brp_for_app("my_game", 15702)
brp.shutdown_bevy_app("my_game", 15702)
```

A process counts as a match when its name equals the app name, with or without a `.exe` suffix. `brp.find_process(app_name)` returns the first matching process, or `None`.

`check_brp_for_app` sends a JSON-RPC `bevy/list` request with a 2-second timeout and reports one of these statuses:

- `running_with_brp`
- `running_no_brp`
- `brp_found_process_not_detected`
- `not_running`

The report also includes the PID when the process is found.

`shutdown_bevy_app` first sends `brp_extras/shutdown`, with a 5-second timeout. It counts the shutdown as clean if any JSON-RPC reply comes back that is not a "method not found" error (`-32601`). Otherwise it terminates the matching process through `kill_process`. The result's `method` field is one of:

- `clean_shutdown`
- `process_kill`
- `none`, when no matching process is running
- `process_kill_failed`

Other functions in `bevybrp.brp`:

- `build_request(method, params=None)` builds a JSON-RPC 2.0 request body with id 1.
- `check_brp_on_port(port, host="localhost")` returns whether a JSON-RPC server answered.
- `try_graceful_shutdown(port, host="localhost")` raises `BrpNotResponsiveError` when nothing answers.
- `kill_process(app_name)` returns the terminated PID, or `None` if no process matched. It raises `ProcessKillError` if termination fails.
- `validate_port(port)` raises `ValueError` for anything other than an integer from 0 to 65535. The default port is `brp.DEFAULT_BRP_PORT` (15702).

## What this package does not do

This is a library only. It has no command-line program and no server that exposes these functions as tools to other clients.

On the BRP side it only checks reachability and asks for shutdown. It does not:

- query or change entities, components or resources
- watch entities for changes