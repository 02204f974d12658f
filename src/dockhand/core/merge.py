"""Key-path merge patching of JSON configuration documents.

The daemon config belongs to the operator: every key the patch does not
name must come out of a merge exactly as it went in. Writes go through a
temporary file in the same directory followed by ``os.replace`` so the
target always holds either the old or the new document.
"""

import json
import logging
import os
import shutil
import stat
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from dockhand.errors import InvalidDocument


logger = logging.getLogger(__name__)

KeyPath = Union[str, Sequence[str]]

DEFAULT_MODE = 0o644


@dataclass(frozen=True)
class PatchOperation:
    """Set value at key_path, creating intermediate objects as needed."""
    key_path: Tuple[str, ...]
    value: Any

    @classmethod
    def set(cls, key_path: KeyPath, value: Any) -> "PatchOperation":
        """Build an operation; a string path is split on dots."""
        if isinstance(key_path, str):
            parts = tuple(key_path.split("."))
        else:
            parts = tuple(key_path)
        if not parts or any(not part for part in parts):
            raise ValueError(f"Invalid key path: {key_path!r}")
        return cls(parts, value)


@dataclass
class MergeResult:
    """What merge_patch did."""
    path: Path
    fresh: bool
    backup_path: Optional[Path] = None
    reason: Optional[str] = None


def parse_document(path: Path, content: bytes) -> Dict[str, Any]:
    """Parse UTF-8 JSON bytes into an object, raising InvalidDocument for anything else."""
    try:
        document = json.loads(content.decode("utf-8"))
    except ValueError as e:
        raise InvalidDocument(path, str(e)) from e
    if not isinstance(document, dict):
        raise InvalidDocument(path, f"top level is {type(document).__name__}, not an object")
    return document


def apply_operations(document: Dict[str, Any], operations: Sequence[PatchOperation]) -> Dict[str, Any]:
    """Apply operations in place and return the document."""
    for operation in operations:
        node = document
        for depth, key in enumerate(operation.key_path[:-1]):
            child = node.get(key)
            if not isinstance(child, dict):
                if key in node:
                    where = ".".join(operation.key_path[:depth + 1])
                    logger.warning(f"Replacing non-object value at {where}")
                child = {}
                node[key] = child
            node = child
        node[operation.key_path[-1]] = operation.value
    return document


def backup_path_for(path: Path, now: Optional[float] = None) -> Path:
    """Sibling backup path tagged with the epoch time; never reuses an existing name."""
    stamp = int(time.time() if now is None else now)
    candidate = path.with_name(f"{path.name}.bak.{stamp}")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.bak.{stamp}.{counter}")
        counter += 1
    return candidate


def backup_file(path: Path) -> Optional[Path]:
    """Copy path to a timestamped sibling; failures are logged and return None."""
    target = backup_path_for(path)
    try:
        shutil.copy2(path, target)
    except OSError as e:
        logger.warning(f"Could not back up {path}: {e}")
        return None
    logger.info(f"Existing {path.name} backed up to {target}")
    return target


def write_atomic(path: Path, content: str, mode: Optional[int] = None) -> None:
    """Write content to a temp file beside path, fsync it, then rename over path."""
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(temp_name, DEFAULT_MODE if mode is None else mode)
        os.replace(temp_name, path)
    except BaseException:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        raise


def serialize(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2) + "\n"


def merge_patch(path: Union[str, Path], operations: Sequence[PatchOperation]) -> MergeResult:
    """Apply operations to the JSON document at path.

    Absent, empty or unparsable documents are replaced by a fresh document
    holding only the patched key paths. Existing files are backed up first;
    an unparsable file whose backup failed raises InvalidDocument and is
    left untouched.
    """
    path = Path(path)
    if not operations:
        raise ValueError("merge_patch needs at least one operation")

    path.parent.mkdir(parents=True, exist_ok=True)

    if not path.exists() or path.stat().st_size == 0:
        document = apply_operations({}, operations)
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else None
        write_atomic(path, serialize(document), mode)
        logger.info(f"Wrote fresh {path}")
        return MergeResult(path=path, fresh=True, reason="absent or empty")

    backup = backup_file(path)
    mode = stat.S_IMODE(path.stat().st_mode)
    content = path.read_bytes()

    try:
        document = parse_document(path, content)
    except InvalidDocument as e:
        if backup is None:
            # the original bytes would be lost
            raise
        logger.error(f"{e}; writing a fresh config")
        fresh = apply_operations({}, operations)
        write_atomic(path, serialize(fresh), mode)
        return MergeResult(path=path, fresh=True, backup_path=backup, reason=e.reason)

    apply_operations(document, operations)
    write_atomic(path, serialize(document), mode)
    logger.info(f"Merged {len(operations)} setting(s) into {path}")
    return MergeResult(path=path, fresh=False, backup_path=backup)


def runtime_operations(name: str, runtime_path: str, set_default: bool) -> Tuple[PatchOperation, ...]:
    """Operations registering a runtime and optionally making it the default."""
    operations = [PatchOperation(("runtimes", name, "path"), runtime_path)]
    if set_default:
        operations.append(PatchOperation(("default-runtime",), name))
    return tuple(operations)
