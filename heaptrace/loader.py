"""Snapshot and source-map loading.

Reads a memory-profiler dump in one blocking read and decodes it into
validated records. Failures of any kind surface as InputError.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from heaptrace.errors import InputError
from heaptrace.models.graph import HeapSnapshot


def _read_json(filepath: Path, what: str) -> object:
    try:
        with open(filepath, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise InputError(f"Error reading {what} \"{filepath}\": {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InputError(f"Error decoding {what} \"{filepath}\": {e}") from e


def load_snapshot(path: str | Path) -> HeapSnapshot:
    """Read and validate a heap snapshot file.

    Args:
        path: Path to the JSON dump produced by the memory profiler.

    Returns:
        Decoded snapshot records.

    Raises:
        InputError: If the file can't be read, isn't JSON, or is missing
            required node/edge fields.
    """
    filepath = Path(path)
    data = _read_json(filepath, "snapshot")
    return parse_snapshot(data, source=str(filepath))


def parse_snapshot(data: object, source: str = "<data>") -> HeapSnapshot:
    """Validate already-decoded snapshot data.

    Raises:
        InputError: If records are missing required fields or have
            invalid values.
    """
    if not isinstance(data, dict):
        raise InputError(f"Snapshot {source} is not a JSON object")
    try:
        return HeapSnapshot.model_validate(data)
    except ValidationError as e:
        raise InputError(f"Invalid snapshot {source}: {e}") from e


def load_symbol_names(path: str | Path) -> list[str]:
    """Read symbol names from a JavaScript source map.

    The ``names`` array of a source map lists the identifiers used in the
    unminified program. These are the user symbols to look for among node
    reprs and edge names.

    Args:
        path: Path to a ``.js.map`` file.

    Returns:
        Names in first-seen order, without duplicates.

    Raises:
        InputError: If the file can't be read or has no ``names`` list.
    """
    filepath = Path(path)
    data = _read_json(filepath, "source map")
    names = data.get("names") if isinstance(data, dict) else None
    if not isinstance(names, list):
        raise InputError(f"Source map \"{filepath}\" has no 'names' list")
    return list(dict.fromkeys(name for name in names if isinstance(name, str) and name))
