"""
Utility functions for running external tools and verifying they are installed.

Functions:
    - run_cmd: Executes a command and returns its exit code along with its
      standard output and error streams.
    - stream_cmd: Executes a command, handing each stderr line to a callback
      as it arrives (used for encoder progress).
    - run_pipeline: Connects two commands with a pipe (``tar | age``) and
      waits for both.
    - tool_env: Builds a per-call environment with overrides applied.
    - which_or_die / fatal: Abort the whole invocation on a precondition error.
"""
import os
import shutil
import subprocess
import threading
from collections import deque
from typing import Callable, Dict, List, Optional, Tuple

from mediaconv.utils.constants import EXIT_FATAL, TOOL_OUTPUT_TAIL_LINES
from mediaconv.utils.logger import LogLevel, log


def tool_env(overrides: Optional[Dict[str, str]] = None) -> Optional[Dict[str, str]]:
    """Return a copy of os.environ with `overrides` applied, or None to inherit unchanged."""
    if not overrides:
        return None
    env = os.environ.copy()
    env.update(overrides)
    return env


def run_cmd(cmd: List[str], env: Optional[Dict[str, str]] = None) -> Tuple[int, str, str]:
    """Run a command and return (code, stdout, stderr)."""
    p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True,
                       env=tool_env(env))
    return p.returncode, p.stdout, p.stderr


def stream_cmd(cmd: List[str], on_line: Optional[Callable[[str], None]] = None,
               env: Optional[Dict[str, str]] = None, merge_stdout: bool = False) -> Tuple[int, str]:
    """
    Run a command, feeding output lines to `on_line` as they arrive.

    Only stderr is read unless `merge_stdout` is set, in which case stdout and
    stderr arrive interleaved. Returns (code, output_tail) where the tail holds
    the last TOOL_OUTPUT_TAIL_LINES lines.
    """
    process = subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE if merge_stdout else subprocess.DEVNULL,
        stderr=subprocess.STDOUT if merge_stdout else subprocess.PIPE,
        text=True,
        errors="replace",
        env=tool_env(env),
    )
    stream = process.stdout if merge_stdout else process.stderr

    tail = deque(maxlen=TOOL_OUTPUT_TAIL_LINES)
    try:
        for line in stream:
            tail.append(line)
            if on_line:
                on_line(line)
    finally:
        stream.close()
        process.wait()
    return process.returncode, "".join(tail)


def _drain(stream, chunks: List[bytes]) -> None:
    for chunk in iter(lambda: stream.read(65536), b""):
        chunks.append(chunk)
    stream.close()


def run_pipeline(producer: List[str], consumer: List[str]) -> Tuple[int, str]:
    """
    Run `producer | consumer` and wait for both processes.

    The producer's stderr is read on a separate thread while the consumer
    runs, so a chatty producer (tar warning about every unreadable file)
    never blocks on a full pipe.

    Returns (code, stderr) where code is the first non-zero exit status of the
    two (producer checked first), or 0 when both succeed.
    """
    upstream = subprocess.Popen(producer, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    up_err: List[bytes] = []
    drainer = threading.Thread(target=_drain, args=(upstream.stderr, up_err), daemon=True)
    drainer.start()

    try:
        downstream = subprocess.Popen(consumer, stdin=upstream.stdout, stdout=subprocess.PIPE,
                                      stderr=subprocess.PIPE)
    except OSError:
        upstream.kill()
        upstream.wait()
        drainer.join()
        raise
    finally:
        # Let the producer see SIGPIPE if the consumer exits early
        upstream.stdout.close()

    _, down_err = downstream.communicate()
    upstream.wait()
    drainer.join()

    stderr_text = (b"".join(up_err) + down_err).decode(errors="replace")
    code = upstream.returncode or downstream.returncode
    return code, stderr_text


def fatal(event: str, **kwargs):
    """Log a precondition failure and stop the whole invocation."""
    log(event, LogLevel.ERROR, **kwargs)
    raise SystemExit(EXIT_FATAL)


def which_or_die(binary: str) -> str:
    """Check if a binary exists on PATH, exit if not found. Returns its full path."""
    found = shutil.which(binary)
    if found is None:
        fatal("startup.error", msg="Required tool not found on PATH", tool=binary)
    return found
