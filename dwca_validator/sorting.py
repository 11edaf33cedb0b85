"""
External (on-disk) sort for line-oriented files.

The input is split into sorted runs of at most chunk_size lines, each written
to a temporary file next to the output, and the runs are then merged with
heapq.merge. Memory use is bounded by chunk_size regardless of input size.
The sort is stable, so lines that compare equal under key keep their input
order.
"""

import heapq
import os
import uuid
from contextlib import ExitStack
from pathlib import Path
from typing import Callable, Iterator, List, Optional, TextIO, Union

import structlog

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]

READ_BLOCK_SIZE = 64 * 1024

# Lone surrogates in caller-built values must survive the round trip to disk
FILE_ENCODING = "utf-8"
FILE_ERRORS = "surrogatepass"


def case_insensitive(line: str) -> str:
    return line.casefold()


def iter_lines(handle: TextIO, terminator: str = "\n") -> Iterator[str]:
    """Yield terminator-separated lines without the terminator"""
    pending = ""
    while True:
        block = handle.read(READ_BLOCK_SIZE)
        if not block:
            break
        pending += block
        parts = pending.split(terminator)
        pending = parts.pop()
        yield from parts
    if pending:
        yield pending


def _write_run(lines: List[str], path: Path, terminator: str) -> None:
    with open(path, "w", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as out:
        for line in lines:
            out.write(line + terminator)


def external_sort(
    input_path: PathLike,
    output_path: PathLike,
    *,
    key: Callable[[str], str] = case_insensitive,
    line_terminator: str = "\n",
    chunk_size: int = 100000,
    temp_dir: Optional[PathLike] = None,
) -> int:
    """
    Sort the lines of input_path into output_path.

    Returns the number of lines written. Run files are removed whether or
    not the sort succeeds; I/O errors propagate as OSError.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")

    run_dir = Path(temp_dir) if temp_dir else Path(output_path).parent
    run_prefix = uuid.uuid4().hex
    runs: List[Path] = []
    total = 0

    try:
        with open(input_path, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as source:
            chunk: List[str] = []
            for line in iter_lines(source, line_terminator):
                chunk.append(line)
                if len(chunk) >= chunk_size:
                    chunk.sort(key=key)
                    run = run_dir / f"{run_prefix}_run{len(runs)}.txt"
                    runs.append(run)
                    _write_run(chunk, run, line_terminator)
                    total += len(chunk)
                    chunk = []

            chunk.sort(key=key)
            total += len(chunk)

        # The last chunk is merged straight from memory
        with ExitStack() as stack:
            sources = [
                iter_lines(
                    stack.enter_context(open(run, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="")),
                    line_terminator,
                )
                for run in runs
            ]
            sources.append(iter(chunk))
            out = stack.enter_context(
                open(output_path, "w", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="")
            )
            for line in heapq.merge(*sources, key=key):
                out.write(line + line_terminator)
    finally:
        for run in runs:
            try:
                os.remove(run)
            except FileNotFoundError:
                pass

    logger.debug("External sort complete", lines=total, runs=len(runs), output=str(output_path))
    return total
