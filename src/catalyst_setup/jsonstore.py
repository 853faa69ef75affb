"""Whole-document JSON reads and atomic writes for config files."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


class InvalidJSONError(ValueError):
    """A config file exists but does not hold a JSON object."""

    def __init__(self, path: Path, detail: str):
        super().__init__(f"{path}: {detail}")
        self.path = path


def read_json(path: Path) -> dict | None:
    """Return the JSON object stored at *path*, or None when the file is absent.

    Raises InvalidJSONError when the file cannot be parsed as an object.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidJSONError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise InvalidJSONError(path, f"expected an object, found {type(data).__name__}")
    return data


def read_json_lenient(path: Path) -> dict | None:
    """Like read_json, but unreadable content is reported as absent."""
    try:
        return read_json(path)
    except InvalidJSONError as exc:
        log.warning("Ignoring unreadable config %s", exc)
        return None


def dig(doc: dict | None, *keys: str, default: Any = None) -> Any:
    """Walk nested dict keys, returning *default* on any miss or empty value."""
    current: Any = doc
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    if current is None or current == "":
        return default
    return current


def dumps(doc: dict) -> str:
    return json.dumps(doc, indent=2) + "\n"


def write_json_atomic(path: Path, doc: dict) -> Path:
    """Serialize *doc* to a temp file next to *path* and rename it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(dumps(doc))
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(temp_path, path)
        log.debug("Wrote %s", path)
        return path
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink(missing_ok=True)
