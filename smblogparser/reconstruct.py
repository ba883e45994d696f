"""Regroup raw Samba log lines into logical records.

Samba writes one event as a header and an indented detail line:

    [2025/09/09 13:01:08.165460, 2] ../../source3/smbd/open.c:1619(open_file)
      alice opened file docs/report.dwg read=Yes write=No (numopen=3)

A file read keeps that layout intact; Loki returns every physical line as a
separate result, so the pairs have to be reassembled.
"""

from enum import Enum
from typing import Iterable

AUDIT_MARKER = "smbd_audit:"


class Strategy(str, Enum):
    DIRECT = "direct"
    REASSEMBLE = "reassemble"


def _is_header(line: str) -> bool:
    return line.startswith("[")


def _is_detail(line: str) -> bool:
    return line.startswith((" ", "\t"))


def reconstruct_direct(lines: Iterable[str]) -> list[str]:
    """Group lines read straight from a file.

    A '[' line opens a record and every following non-'[' line is appended
    to it. Audit lines are emitted alone and leave the open record untouched.
    """
    records: list[str] = []
    current: str | None = None

    for raw in lines:
        line = raw.rstrip("\r\n")

        if AUDIT_MARKER in line:
            records.append(line)
            continue

        if _is_header(line):
            if current is not None:
                records.append(current)
            current = line
        elif current is not None:
            current += "\n" + line

    if current is not None:
        records.append(current)

    return records


def reassemble(lines: Iterable[str]) -> list[str]:
    """Pair each '[' line with the very next line when that one is indented."""
    lines = [raw.rstrip("\r\n") for raw in lines]
    records: list[str] = []
    i = 0

    while i < len(lines):
        line = lines[i]
        if (
            _is_header(line)
            and AUDIT_MARKER not in line
            and i + 1 < len(lines)
            and _is_detail(lines[i + 1])
            and AUDIT_MARKER not in lines[i + 1]
        ):
            records.append(line + "\n" + lines[i + 1])
            i += 2
            continue

        records.append(line)
        i += 1

    return records


def reconstruct(lines: Iterable[str], strategy: Strategy) -> list[str]:
    """Dispatch to the strategy the line source declared."""
    if strategy == Strategy.REASSEMBLE:
        return reassemble(lines)
    return reconstruct_direct(lines)
