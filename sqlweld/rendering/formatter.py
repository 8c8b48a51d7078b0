"""External formatter invocation."""

from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path
from typing import IO, Sequence

from ..core.errors import FormatterError

logger = logging.getLogger(__name__)


def run_formatter(command: Sequence[str], text: str, path: Path) -> str:
    """Pipe ``text`` through ``command`` and return what it prints.

    Input is fed from its own thread while stdout and stderr are drained by
    reader threads, so a formatter that writes before it has consumed all
    of its input cannot deadlock against us.

    Args:
        command: Formatter argv
        text: Rendered output including the header
        path: Template the output belongs to, for error reporting

    Returns:
        The formatter's stdout
    """
    logger.debug(f"Formatting {path} with {' '.join(command)}")

    try:
        proc = subprocess.Popen(
            list(command),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        raise FormatterError(path, f"Could not start {command[0]!r}: {exc}") from exc

    stdout_buf: list[bytes] = []
    stderr_buf: list[bytes] = []
    write_errors: list[OSError] = []

    def _writer(stream: IO[bytes] | None, data: bytes) -> None:
        if stream is None:
            return
        try:
            stream.write(data)
        except OSError as exc:
            write_errors.append(exc)
        finally:
            try:
                stream.close()
            except OSError as exc:
                write_errors.append(exc)

    def _reader(stream: IO[bytes] | None, buffer: list[bytes]) -> None:
        if stream is None:
            return
        buffer.append(stream.read())
        stream.close()

    threads = [
        threading.Thread(
            target=_writer, args=(proc.stdin, text.encode("utf-8")), daemon=True
        ),
        threading.Thread(target=_reader, args=(proc.stdout, stdout_buf), daemon=True),
        threading.Thread(target=_reader, args=(proc.stderr, stderr_buf), daemon=True),
    ]
    for thread in threads:
        thread.start()

    returncode = proc.wait()
    for thread in threads:
        thread.join()

    stderr_text = b"".join(stderr_buf).decode("utf-8", errors="replace")

    if returncode != 0:
        raise FormatterError(
            path,
            "Formatter exited with an error",
            exit_code=returncode,
            stderr=stderr_text,
        )
    if write_errors:
        raise FormatterError(
            path,
            f"Could not send output to formatter: {write_errors[0]}",
            stderr=stderr_text,
        )

    try:
        return b"".join(stdout_buf).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatterError(path, f"Formatter output is not valid UTF-8: {exc}") from exc
