"""
Helpers for talking to the GitHub Actions runner.

Workflow commands are plain lines on stdout; step outputs go to the file named
by GITHUB_OUTPUT. Outside of a runner the commands are harmless text.
"""

import os
import sys
import uuid
from contextlib import contextmanager


def _escape(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _command(name: str, message: str) -> None:
    # Keep annotations in order with log records written to stderr
    sys.stderr.flush()
    print(f"::{name}::{_escape(message)}", flush=True)


def warning(message: str) -> None:
    _command("warning", message)


def error(message: str) -> None:
    _command("error", message)


@contextmanager
def group(title: str):
    _command("group", title)
    try:
        yield
    finally:
        _command("endgroup", "")


def set_output(name: str, value: str) -> None:
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        print(f"{name}={value}")
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
