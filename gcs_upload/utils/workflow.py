"""
GitHub Actions workflow command helpers.

The runner reads specially formatted lines from the step's stdout
(``::name key=value::message``) and a handful of files named by environment
variables. This module writes both.

Example usage:
    >>> from gcs_upload.utils import workflow
    >>> with workflow.group("uploading batch"):
    ...     print("Uploaded: a.png")
    >>> workflow.set_output("files", '["a.png"]')
"""

import os
import sys
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, TextIO


def escape_data(value: str) -> str:
    """Escape a command message so it survives the runner's line parser."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a command property value; ':' and ',' are separators there."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def issue_command(
    command: str,
    message: str = "",
    properties: Optional[Dict[str, str]] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Write one workflow command line.

    Args:
        command: Command name, e.g. "group" or "error"
        message: Command payload
        properties: Optional key/value properties
        stream: Output stream (default: sys.stdout)
    """
    out = stream or sys.stdout
    line = f"::{command}"
    if properties:
        line += " " + ",".join(
            f"{key}={escape_property(str(value))}"
            for key, value in properties.items()
            if value is not None
        )
    line += f"::{escape_data(message)}"
    out.write(line + os.linesep)
    out.flush()


def start_group(name: str, stream: Optional[TextIO] = None) -> None:
    """Begin a collapsible output group in the job log."""
    issue_command("group", name, stream=stream)


def end_group(stream: Optional[TextIO] = None) -> None:
    """Close the current output group."""
    issue_command("endgroup", stream=stream)


@contextmanager
def group(name: str, stream: Optional[TextIO] = None) -> Iterator[None]:
    """Wrap a block of work in an output group, closing it on errors too."""
    start_group(name, stream=stream)
    try:
        yield
    finally:
        end_group(stream=stream)


def add_mask(value: str, stream: Optional[TextIO] = None) -> None:
    """Register a secret so the runner redacts it from all later log lines."""
    if value:
        issue_command("add-mask", value, stream=stream)


def set_output(
    name: str,
    value: str,
    environ: Optional[Dict[str, str]] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Publish a step output.

    Appends a heredoc block to the file named by GITHUB_OUTPUT. Runners that
    predate the output file get the legacy ``set-output`` command instead.

    Args:
        name: Output name
        value: Output value (may span several lines)
        environ: Environment mapping (default: os.environ)
        stream: Stream for the legacy command (default: sys.stdout)
    """
    env = os.environ if environ is None else environ
    output_path = env.get("GITHUB_OUTPUT")

    if not output_path:
        out = stream or sys.stdout
        out.write(os.linesep)
        issue_command("set-output", value, {"name": name}, stream=out)
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected input: delimiter {delimiter} found in output")

    with open(output_path, "a", encoding="utf-8") as handle:
        handle.write(f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}{os.linesep}")


def set_failed(message: str, stream: Optional[TextIO] = None) -> int:
    """
    Mark the step as failed.

    Emits an error annotation and returns the exit code the caller should
    terminate with.
    """
    issue_command("error", message, stream=stream)
    return 1
