"""
yttxt.pipeline - Subprocess chaining and stream forwarding.

Each stage runs as its own OS process with stdout connected to the next
stage's stdin. Backpressure is provided by the pipe buffers. The last
stage's output is streamed into a staging file next to the destination and
echoed as it arrives; the staging file only replaces the destination once
every stage has exited cleanly.
"""

from __future__ import annotations

import shlex
import subprocess
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from yttxt.exceptions import PipelineCancelled, PipelineError
from yttxt.io import open_staging_file
from yttxt.logging import logger

TERMINATE_TIMEOUT = 5


class Stage(BaseModel):
    """One subprocess in the producer → transcoder → transcriber chain."""

    name: str
    argv: list[str] = Field(min_length=1)

    def __str__(self) -> str:
        return shlex.join(self.argv)


def spawn_stages(stages: list[Stage]) -> list[subprocess.Popen]:
    """Start every stage, wiring each stdout to the next stdin.

    The parent closes its copy of each intermediate pipe so an upstream
    stage receives SIGPIPE as soon as its consumer exits.

    Raises:
        PipelineError: If a stage executable cannot be started
    """
    procs: list[subprocess.Popen] = []
    upstream = None
    for stage in stages:
        logger.debug("stage %s: %s", stage.name, stage)
        try:
            proc = subprocess.Popen(
                stage.argv,
                stdin=upstream if upstream is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
            )
        except OSError as e:
            terminate_all(procs)
            raise PipelineError(stage.name, 127, f"Could not start {stage.name}: {e}") from e
        if upstream is not None:
            upstream.close()
        upstream = proc.stdout
        procs.append(proc)
    return procs


def terminate_all(procs: list[subprocess.Popen]) -> None:
    """Terminate any still-running stage and release its pipe."""
    for proc in procs:
        if proc.poll() is None:
            proc.terminate()
    for proc in procs:
        try:
            proc.wait(timeout=TERMINATE_TIMEOUT)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
        if proc.stdout is not None and not proc.stdout.closed:
            proc.stdout.close()


def failed_stage(stages: list[Stage], returncodes: list[int]) -> tuple[Stage, int] | None:
    """Pick the stage to blame for a failed pipeline, as ``set -o pipefail`` does.

    The rightmost non-zero stage wins. Upstream stages usually fail only
    because their consumer went away, and tools that ignore SIGPIPE report
    that as an ordinary non-zero exit.
    """
    failed = [(stage, code) for stage, code in zip(stages, returncodes) if code != 0]
    if not failed:
        return None
    return failed[-1]


def run_pipeline(
    stages: list[Stage],
    output_path: Path,
    echo: Callable[[str], Any] | None = None,
    cancel: threading.Event | None = None,
) -> dict[str, Any]:
    """Run a chain of stages, writing the final stage's stdout to a file.

    Args:
        stages: Stages in pipeline order; the first reads from /dev/null
        output_path: Destination for the last stage's output
        echo: Called with each decoded line as it is written
        cancel: Checked between lines; when set, the pipeline is torn down

    Returns:
        Dict with output path, bytes written and per-stage return codes

    Raises:
        PipelineError: If any stage exits non-zero or cannot be started
        PipelineCancelled: On cancellation or KeyboardInterrupt
    """
    if not stages:
        raise ValueError("Pipeline needs at least one stage")

    output_path = Path(output_path)
    staging = open_staging_file(output_path)
    staging_path = Path(staging.name)
    procs: list[subprocess.Popen] = []
    bytes_written = 0

    try:
        with staging:
            procs = spawn_stages(stages)
            last = procs[-1].stdout
            for line in iter(last.readline, b""):
                staging.write(line)
                bytes_written += len(line)
                if echo is not None:
                    echo(line.decode("utf-8", errors="replace"))
                if cancel is not None and cancel.is_set():
                    raise PipelineCancelled("Pipeline cancelled")
            last.close()
            returncodes = [proc.wait() for proc in procs]

        failure = failed_stage(stages, returncodes)
        if failure is not None:
            stage, code = failure
            statuses = ", ".join(
                f"{s.name}={c}" for s, c in zip(stages, returncodes) if c != 0
            )
            raise PipelineError(
                stage.name, code, f"{stage.name} exited with status {code} ({statuses})"
            )
    except KeyboardInterrupt as e:
        terminate_all(procs)
        staging_path.unlink(missing_ok=True)
        raise PipelineCancelled("Interrupted") from e
    except BaseException:
        terminate_all(procs)
        staging_path.unlink(missing_ok=True)
        raise

    staging_path.replace(output_path)
    logger.debug("wrote %d bytes to %s", bytes_written, output_path)

    return {
        "output": str(output_path),
        "bytes_written": bytes_written,
        "returncodes": {stage.name: code for stage, code in zip(stages, returncodes)},
    }
