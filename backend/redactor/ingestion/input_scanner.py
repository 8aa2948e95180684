"""
Input directory scanning.

The directory is listed once per run.  Files are taken in name order and
that order is fixed for the rest of the run: merge order, page offsets
and split ranges all follow it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from redactor.core.constants import CONTENT_TYPES, DEFAULT_CONTENT_TYPE
from redactor.core.logging import get_logger
from redactor.pipeline.errors import InputScanError, LocalIOError

logger = get_logger(__name__)


@dataclass(frozen=True)
class InputFile:
    """One file found in the input directory, before upload."""

    index: int
    path: Path
    filename: str
    extension: str
    content_type: str

    def read(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise LocalIOError(f"Could not read {self.path}: {exc}") from exc


def file_extension(filename: str) -> str:
    """Lower-cased text after the last dot; the whole name when there is none."""
    return filename.rsplit(".", 1)[-1].lower()


def content_type_for(extension: str) -> str:
    return CONTENT_TYPES.get(extension, DEFAULT_CONTENT_TYPE)


def output_filename(filename: str, fmt: str) -> str:
    """``report.docx`` → ``report.pdf``: the extension replaced by ``fmt``."""
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    return f"{stem}.{fmt}"


def scan_inputs(
    input_dir: Path,
    output_format: str = "pdf",
    reserved_names: tuple[str, ...] = (),
) -> list[InputFile]:
    """
    List the regular files in ``input_dir``.

    Raises:
        InputScanError: if the directory is missing or empty, or if two
            inputs (or an input and a reserved name) would produce the
            same output filename.
    """
    if not input_dir.is_dir():
        raise InputScanError(f"Input directory {input_dir} does not exist")

    paths = sorted(p for p in input_dir.iterdir() if p.is_file())
    if not paths:
        raise InputScanError(
            f"You must have at least one file in your input directory ({input_dir})"
        )

    seen: dict[str, str] = {name: "(reserved)" for name in reserved_names}
    files: list[InputFile] = []
    for index, path in enumerate(paths):
        out_name = output_filename(path.name, output_format)
        if out_name in seen:
            raise InputScanError(
                f"Inputs {seen[out_name]} and {path.name} would both be written to {out_name}"
            )
        seen[out_name] = path.name

        extension = file_extension(path.name)
        files.append(InputFile(
            index=index,
            path=path,
            filename=path.name,
            extension=extension,
            content_type=content_type_for(extension),
        ))

    logger.info(
        "Input files found",
        input_dir=str(input_dir),
        count=len(files),
        files=[f.filename for f in files],
    )
    return files
