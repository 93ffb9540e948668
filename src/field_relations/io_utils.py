"""
File and process helpers.

Record reading serves :class:`~field_relations.providers.JsonDirectoryProvider`:
a data file may be NDJSON, a single JSON object or a top-level array, and any
of them may be gzip-compressed. ``_run`` is the subprocess wrapper the test
suite uses to drive the CLI.
"""
from __future__ import annotations

import gzip
import io
import json
import subprocess  # nosec B404: only used with argument lists, never a shell
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import IO, Any, Union

import ijson

from .constants import SNIFF_BUFFER_SIZE
from .logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

GZIP_MAGIC = b"\x1f\x8b"
_SHELL_METACHARACTERS = (";", "|", "&", "\n", "\r")

__all__ = [
    "CommandError",
    "RecordDecodeError",
    "_run",
    "open_data_file",
    "sniff_ndjson",
    "iter_records",
]


class CommandError(Exception):
    """Raised when `_run` sees a non-zero exit code."""

    def __init__(self, cmd: Sequence[str], returncode: int, stdout: str, stderr: str):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command {cmd} failed with {returncode}: {stderr.strip()}")


class RecordDecodeError(ValueError):
    """A line of an NDJSON file is not valid JSON."""

    def __init__(self, path: PathLike, line_number: int, cause: json.JSONDecodeError):
        self.path = str(path)
        self.line_number = line_number
        super().__init__(f"{path}:{line_number}: {cause.msg}")


def _run(args, cwd=None, env=None, check_untrusted=True, check=True):
    """
    Run a command without a shell and capture its text output.

    Parameters
    ----------
    args : list[str]
        Command and arguments; must be non-empty.
    cwd, env
        Passed through to ``subprocess.run``.
    check_untrusted : bool
        Reject arguments containing shell metacharacters.
    check : bool
        Raise CommandError on a non-zero exit status; with False the
        CompletedProcess is returned either way (CLI exit-code tests).
    """
    if not isinstance(args, (list, tuple)) or not args:
        raise ValueError("args must be a non-empty list of strings")
    for a in args:
        if not isinstance(a, str):
            raise ValueError(f"Non-string arg: {a!r}")
        if check_untrusted and any(c in a for c in _SHELL_METACHARACTERS):
            raise ValueError(f"Suspicious characters in arg: {a!r}")

    res = subprocess.run(args, cwd=cwd, capture_output=True, text=True, env=env)  # nosec B603
    if check and res.returncode != 0:
        raise CommandError(args, res.returncode, res.stdout, res.stderr)
    return res


def open_data_file(path: PathLike, binary: bool = False) -> IO[Any]:
    """
    Open a data file, transparently decompressing gzip (detected by magic bytes).

    Text mode decodes strict UTF-8 and drops a leading BOM; binary mode is what
    ``ijson`` wants.
    """
    stream: IO[bytes] = open(path, "rb")
    if stream.read(2) == GZIP_MAGIC:
        stream.close()
        stream = gzip.open(path, "rb")  # type: ignore[assignment]
    else:
        stream.seek(0)
    if binary:
        return stream
    return io.TextIOWrapper(stream, encoding="utf-8-sig", errors="strict")


def sniff_ndjson(sample: str) -> bool:
    """True if the first two non-empty lines both start with ``{``."""
    lines = [ln.strip() for ln in sample.splitlines() if ln.strip()]
    return len(lines) >= 2 and lines[0].startswith("{") and lines[1].startswith("{")


def _iter_json_lines(lines: Iterable[str], path: PathLike) -> Iterator[Any]:
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            yield json.loads(line)
        except json.JSONDecodeError as e:
            raise RecordDecodeError(path, line_number, e) from e


def iter_records(path: PathLike) -> Iterator[Any]:
    """
    Yield the records of a JSON data file.

    Layouts, in the order they are tried:
      1) NDJSON (one JSON value per line)
      2) a single JSON object, or NDJSON whose first line exceeds the sniff buffer
      3) a top-level array, streamed item by item with ijson
      4) anything else, parsed line by line

    Raises:
        RecordDecodeError: A line of a line-oriented file is not valid JSON.
        ijson.JSONError: A top-level array is malformed.
    """
    with open_data_file(path) as f:
        head = f.read(SNIFF_BUFFER_SIZE)
        f.seek(0)
        start = head.lstrip()[:1]

        if not start:
            return

        if sniff_ndjson(head):
            yield from _iter_json_lines(f, path)
            return

        if start == "{":
            try:
                document = json.load(f)
            except json.JSONDecodeError:
                logger.debug("%s is not a single JSON object, reading it as NDJSON", path)
                f.seek(0)
                yield from _iter_json_lines(f, path)
            else:
                yield document
            return

        if start == "[":
            with open_data_file(path, binary=True) as fb:
                yield from ijson.items(fb, "item")
            return

        yield from _iter_json_lines(f, path)
