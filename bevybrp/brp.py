"""Talking to running Bevy apps over the Bevy Remote Protocol (BRP)."""

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request
from typing import Any

import psutil

DEFAULT_BRP_PORT = 15702
BRP_DEFAULT_HOST = "localhost"
BRP_HTTP_PROTOCOL = "http"

JSONRPC_VERSION = "2.0"
JSONRPC_DEFAULT_ID = 1
JSONRPC_FIELD = "jsonrpc"
JSONRPC_FIELD_ID = "id"
JSONRPC_FIELD_METHOD = "method"
JSONRPC_FIELD_PARAMS = "params"

BRP_METHOD_LIST = "bevy/list"
BRP_METHOD_EXTRAS_SHUTDOWN = "brp_extras/shutdown"

METHOD_NOT_FOUND_CODE = -32601
STATUS_CHECK_TIMEOUT = 2.0
SHUTDOWN_TIMEOUT = 5.0

_MAX_PORT = 65535


class BrpNotResponsiveError(ConnectionError):
    """No BRP server answered on the requested port."""


class ProcessKillError(OSError):
    """A running process could not be terminated."""


def _response(message: str, data: dict[str, Any]) -> dict[str, Any]:
    return {"message": message, "data": data}


def validate_port(port: Any) -> int:
    """Return *port* if it is a valid 16-bit port number, else raise ValueError."""
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= _MAX_PORT:
        raise ValueError("Validation failed for port: must be a valid u16")
    return port


def build_request(method: str, params: Any = None) -> dict[str, Any]:
    """Build a JSON-RPC request body for a BRP method."""
    request: dict[str, Any] = {
        JSONRPC_FIELD: JSONRPC_VERSION,
        JSONRPC_FIELD_ID: JSONRPC_DEFAULT_ID,
        JSONRPC_FIELD_METHOD: method,
    }
    if params is not None:
        request[JSONRPC_FIELD_PARAMS] = params
    return request


def _post_json(url: str, payload: dict[str, Any], timeout: float) -> bytes:
    """POST *payload* as JSON and return the response body, whatever its status.

    Raises OSError or http.client.HTTPException when no response arrives.
    """
    request = urllib.request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as reply:
            return reply.read()
    except urllib.error.HTTPError as exc:
        return exc.read()


def _parse_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None


def _url(host: str, port: int) -> str:
    return f"{BRP_HTTP_PROTOCOL}://{host}:{port}"


def find_process(app_name: str) -> psutil.Process | None:
    """A running process named *app_name* (with or without ``.exe``), or None."""
    for process in psutil.process_iter(["name"]):
        name = process.info.get("name") or ""
        if (
            name == app_name
            or name == f"{app_name}.exe"
            or name.removesuffix(".exe") == app_name
        ):
            return process
    return None


def check_brp_on_port(port: int, host: str = BRP_DEFAULT_HOST) -> bool:
    """Whether a JSON-RPC server answers a ``bevy/list`` request on *port*."""
    try:
        body = _post_json(_url(host, port), build_request(BRP_METHOD_LIST), STATUS_CHECK_TIMEOUT)
    except (OSError, http.client.HTTPException):
        return False
    reply = _parse_json(body)
    return isinstance(reply, dict) and JSONRPC_FIELD in reply


def check_brp_for_app(app_name: str, port: int = DEFAULT_BRP_PORT) -> dict[str, Any]:
    """Report whether *app_name* is running and whether BRP answers on *port*."""
    port = validate_port(port)
    process = find_process(app_name)
    brp_responsive = check_brp_on_port(port)

    if process is not None and brp_responsive:
        status = "running_with_brp"
        message = (
            f"Process '{app_name}' (PID: {process.pid}) is running with BRP enabled "
            f"on port {port}"
        )
    elif process is not None:
        status = "running_no_brp"
        message = (
            f"Process '{app_name}' (PID: {process.pid}) is running but not responding "
            f"to BRP on port {port}. Make sure RemotePlugin is added to your Bevy app."
        )
    elif brp_responsive:
        status = "brp_found_process_not_detected"
        message = (
            f"BRP is responding on port {port} but process '{app_name}' not detected. "
            "Another process may be using BRP."
        )
    else:
        status = "not_running"
        message = f"Process '{app_name}' is not currently running"

    return _response(
        message,
        {
            "status": status,
            "app_name": app_name,
            "port": port,
            "app_running": process is not None,
            "brp_responsive": brp_responsive,
            "app_pid": process.pid if process is not None else None,
        },
    )


def try_graceful_shutdown(port: int, host: str = BRP_DEFAULT_HOST) -> bool:
    """Ask the app on *port* to shut down through the BRP extras shutdown method.

    Returns False when the server does not offer that method or the answer is
    not JSON-RPC, and raises BrpNotResponsiveError when nothing answers.
    """
    try:
        body = _post_json(
            _url(host, port), build_request(BRP_METHOD_EXTRAS_SHUTDOWN), SHUTDOWN_TIMEOUT
        )
    except (OSError, http.client.HTTPException) as exc:
        raise BrpNotResponsiveError(
            "BRP request 'check' failed: BRP not responsive"
        ) from exc
    reply = _parse_json(body)
    if not isinstance(reply, dict) or JSONRPC_FIELD not in reply:
        return False
    error = reply.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        if isinstance(code, int) and not isinstance(code, bool) and code == METHOD_NOT_FOUND_CODE:
            return False
    return True


def kill_process(app_name: str) -> int | None:
    """Send SIGTERM to the process named *app_name*; return its PID, or None if absent."""
    process = find_process(app_name)
    if process is None:
        return None
    pid = process.pid
    try:
        process.terminate()
    except psutil.Error as exc:
        raise ProcessKillError(
            f"Failed to terminate process {pid}: Failed to send SIGTERM"
        ) from exc
    return pid


def shutdown_bevy_app(app_name: str, port: int = DEFAULT_BRP_PORT) -> dict[str, Any]:
    """Shut an app down cleanly via BRP, falling back to terminating its process."""
    port = validate_port(port)
    try:
        graceful = try_graceful_shutdown(port)
    except BrpNotResponsiveError:
        graceful = False

    if graceful:
        message = (
            f"Successfully initiated graceful shutdown for '{app_name}' via "
            f"bevy_brp_extras on port {port}"
        )
        return _response(
            message,
            {
                "status": "success",
                "method": "clean_shutdown",
                "app_name": app_name,
                "port": port,
                "message": message,
            },
        )

    try:
        pid = kill_process(app_name)
    except ProcessKillError as exc:
        message = str(exc)
        return _response(
            message,
            {
                "status": "error",
                "method": "process_kill_failed",
                "app_name": app_name,
                "port": port,
                "message": message,
            },
        )

    if pid is None:
        message = f"Process '{app_name}' is not currently running"
        return _response(
            message,
            {
                "status": "error",
                "method": "none",
                "app_name": app_name,
                "port": port,
                "message": message,
            },
        )

    message = (
        f"Terminated process '{app_name}' (PID: {pid}) using kill. "
        "Consider adding bevy_brp_extras for clean shutdown."
    )
    return _response(
        message,
        {
            "status": "success",
            "method": "process_kill",
            "app_name": app_name,
            "port": port,
            "pid": pid,
            "message": message,
        },
    )