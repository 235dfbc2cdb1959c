"""
Fail-fast, concurrency-bounded execution of independent shell commands.

Two backends:
  parallel  GNU parallel (-j N --halt soon,fail=1), commands fed on stdin
  pool      in-process thread pool; stops launching after the first failure

Either way, commands already running when a failure is seen are allowed to
finish, and the batch as a whole is reported as failed.
"""

from __future__ import annotations

import subprocess
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from tqdm import tqdm

from .config import JOB_CONCURRENCY, PARALLEL_EXE
from .errors import RunError
from .log import get_logger

LOGGER = get_logger("jobs")


@dataclass(frozen=True)
class BatchReport:
    label: str
    submitted: int
    backend: str


def run_jobs(commands: Sequence[str], label: str,
             concurrency: int = JOB_CONCURRENCY,
             backend: str = "parallel") -> BatchReport:
    num_jobs = len(commands)
    if num_jobs == 0:
        return BatchReport(label=label, submitted=0, backend=backend)

    LOGGER.info("%s (# %d job%s @ %d)", label, num_jobs,
                "" if num_jobs == 1 else "s", concurrency)

    if backend == "parallel":
        _run_parallel(commands, concurrency)
    elif backend == "pool":
        _run_pool(commands, label, concurrency)
    else:
        raise RunError(f"Unknown job backend {backend!r}")

    return BatchReport(label=label, submitted=num_jobs, backend=backend)


def _run_parallel(commands: Sequence[str], concurrency: int,
                  exe: str = PARALLEL_EXE) -> None:
    cmd = [exe, "-j", str(concurrency), "--halt", "soon,fail=1"]
    try:
        proc = subprocess.run(
            cmd,
            input="\n".join(commands) + "\n",
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise RunError(f'Failed to start "{exe}": {e}') from e

    if proc.returncode != 0:
        msg = f"Failed to run jobs in parallel (exit {proc.returncode})"
        err = proc.stderr.strip()
        if err:
            msg = f"{msg}: {err.splitlines()[-1]}"
        raise RunError(msg)


def _run_shell(command: str) -> Tuple[int, str]:
    proc = subprocess.run(command, shell=True, stdout=subprocess.DEVNULL,
                          stderr=subprocess.PIPE, text=True)
    return proc.returncode, proc.stderr


def _run_pool(commands: Sequence[str], label: str, concurrency: int) -> None:
    queue = iter(commands)
    running = {}
    failed: List[str] = []

    with ThreadPoolExecutor(max_workers=concurrency) as pool, \
            tqdm(total=len(commands), desc=label, unit="job") as bar:

        def launch():
            command = next(queue, None)
            if command is not None:
                running[pool.submit(_run_shell, command)] = command

        for _ in range(concurrency):
            launch()

        while running:
            done, _ = wait(running, return_when=FIRST_COMPLETED)
            for fut in done:
                command = running.pop(fut)
                bar.update(1)
                try:
                    rc, err = fut.result()
                except OSError as e:
                    rc, err = -1, str(e)
                if rc != 0:
                    LOGGER.error("Job failed (exit %d): %s\n%s", rc, command, err.rstrip())
                    failed.append(command)
            # halt soon: nothing new once anything has failed
            if not failed:
                for _ in done:
                    launch()

    if failed:
        skipped = len(commands) - bar.n
        raise RunError(
            f"Failed to run jobs in parallel ({len(failed)} failed, {skipped} not started)",
            failed=failed,
        )
