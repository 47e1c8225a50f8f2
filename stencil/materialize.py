"""Writing a generated file-system description to disk.

Each destination root receives the full description. Records are applied in
order: directories are created with their parents, files get their parent
directories and then their content. In strict mode an existing file stops
the write instead of being overwritten.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from stencil.errors import MaterializationError
from stencil.schema import FileSystem, FileSystemObject

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "__name__"


@dataclass
class MaterializeReport:
    """What was written under one destination root."""
    dest: Path
    directories: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    overwritten: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.directories) + len(self.files)


def substitute(text: str, name: str | None, placeholder: str = DEFAULT_PLACEHOLDER) -> str:
    """Replace every placeholder occurrence with ``name``."""
    if not name or not placeholder:
        return text
    return text.replace(placeholder, name)


def _target_path(dest: Path, obj: FileSystemObject, name: str | None, placeholder: str) -> Path:
    rel = substitute(str(obj.relative_path), name, placeholder)
    try:
        target = (dest / rel).resolve()
    except ValueError as e:
        # e.g. a NUL byte arriving through the instance name
        raise MaterializationError(dest / obj.path, e) from e
    # The substituted name itself could smuggle in a "../"
    if target != dest and dest not in target.parents:
        raise MaterializationError(
            target, PermissionError(f"{obj.path!r} resolves outside {dest}"),
        )
    return target


def _write_file(path: Path, content: str, strict: bool) -> bool:
    """Write one file; returns True when an existing file was replaced."""
    existed = path.exists()
    mode = "x" if strict else "w"
    with open(path, mode, encoding="utf-8", newline="") as f:
        f.write(content)
    return existed


def materialize(
    dest: str | Path,
    file_system: FileSystem,
    strict: bool = False,
    name: str | None = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> MaterializeReport:
    """Create the directories and files of ``file_system`` under ``dest``.

    Args:
        dest: Destination root; created if missing.
        file_system: Validated description returned by a provider.
        strict: Fail with ``MaterializationError`` if a file already exists.
        name: Instance name substituted for ``placeholder`` in paths and contents.
        placeholder: Token to replace.

    Returns:
        A report of what was created under ``dest``.
    """
    root = Path(dest).resolve()
    report = MaterializeReport(dest=root)
    logger.info("Generating file content in %s", root)
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MaterializationError(root, e) from e

    for obj in file_system.file_contents:
        target = _target_path(root, obj, name, placeholder)
        rel = target.relative_to(root).as_posix() if target != root else "."
        try:
            if obj.is_directory:
                target.mkdir(parents=True, exist_ok=True)
                report.directories.append(rel)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            content = substitute(obj.content or "", name, placeholder)
            if _write_file(target, content, strict):
                report.overwritten.append(rel)
            report.files.append(rel)
        except (OSError, ValueError) as e:
            raise MaterializationError(target, e) from e

        logger.debug("Wrote %s", rel)

    return report


async def materialize_all(
    dests: Iterable[str | Path],
    file_system: FileSystem,
    strict: bool = False,
    name: str | None = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
    max_parallel: int = 4,
) -> list[MaterializeReport]:
    """Materialize ``file_system`` into every destination root concurrently.

    Reports come back in the order of ``dests``. The first failure is
    raised once all destinations have finished.
    """
    semaphore = asyncio.Semaphore(max(1, max_parallel))

    async def run_one(dest: str | Path) -> MaterializeReport:
        async with semaphore:
            return await asyncio.to_thread(
                materialize, dest, file_system, strict, name, placeholder,
            )

    results = await asyncio.gather(*(run_one(d) for d in dests), return_exceptions=True)

    reports: list[MaterializeReport] = []
    for result in results:
        if isinstance(result, BaseException):
            raise result
        reports.append(result)
    return reports
