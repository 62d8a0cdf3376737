"""
Record parsing.

A record list is plain text with one record per line:

    alice 123      -> name "alice", payload "123"
    carol          -> name and payload both "carol"

Blank lines are kept by `split_lines` so that job indices match line
numbers; the worker that receives a blank line does nothing with it.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .errors import MalformedRecordError

_SEPARATORS = re.compile(r"[/\\]")


@dataclass(frozen=True)
class Record:
    name: str
    payload: str


def split_lines(raw: str) -> List[str]:
    """Split on newline only. Empty lines are preserved."""
    return raw.split("\n")


def is_blank(line: str) -> bool:
    return not line.strip()


def parse_record(line: str) -> Record:
    """
    Turn one non-blank line into a Record.

    The trimmed line is split on single spaces, so "a  b" counts as three
    tokens and is rejected like any other line that is not one or two tokens.
    """
    tokens = line.strip().split(" ")
    if len(tokens) == 1:
        name = payload = tokens[0]
    elif len(tokens) == 2:
        name, payload = tokens
    else:
        raise MalformedRecordError(line, f"expected 1 or 2 tokens, got {len(tokens)}", len(tokens))

    if not name:
        raise MalformedRecordError(line, "empty name", len(tokens))
    if _SEPARATORS.search(name) or name in (".", ".."):
        raise MalformedRecordError(line, f"name {name!r} is not a plain file name", len(tokens))
    return Record(name=name, payload=payload)


def normalize_extension(extension: str) -> str:
    extension = extension.strip()
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension


def build_output_path(folder: Union[str, os.PathLike], name: str, extension: str) -> Path:
    """Destination of a record's image: folder/<name><extension>."""
    return Path(folder) / f"{name}{normalize_extension(extension)}"
