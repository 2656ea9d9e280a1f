"""Helpers for files submitted for review."""

from __future__ import annotations

import os
import re
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict

from code_roaster.models import UploadedFile


LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".go": "go",
    ".rs": "rust",
    ".php": "php",
    ".rb": "ruby",
    ".swift": "swift",
    ".kt": "kotlin",
    ".dart": "dart",
}

# Extensions whose oversized files are reduced to their key sections.
REDUCIBLE_EXTENSIONS = {".js", ".ts", ".jsx", ".tsx", ".dart", ".rb", ".swift", ".kt"}

SIZE_LIMIT = 50 * 1024
COMPRESS_THRESHOLD = 30 * 1024
SMALL_FILE_THRESHOLD = 10 * 1024

_IMPORT_LINE = re.compile(r"^\s*import\s+[^;]+;\s*$", re.MULTILINE | re.IGNORECASE)
_EXPORT_LINE = re.compile(r"^\s*export\s+(?:default\s+)?[^;]+;\s*$", re.MULTILINE | re.IGNORECASE)
_DECLARATION = re.compile(
    r"^\s*(?:export\s+)?(?:async\s+)?(?:function|class|interface|type|enum)\b.*$",
    re.MULTILINE | re.IGNORECASE,
)
_ARROW_FUNCTION = re.compile(
    r"^\s*(?:export\s+)?(?:const|let|var)\s+\w+\s*=\s*(?:async\s*)?\([^)]*\)\s*=>",
    re.MULTILINE | re.IGNORECASE,
)


def file_extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def language_for_extension(extension: str) -> str:
    ext = extension.lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return LANGUAGE_BY_EXTENSION.get(ext, "plaintext")


def format_file_size(
    size: int,
    *,
    show_indicator: bool = False,
    size_limit: int = SIZE_LIMIT,
    compress_threshold: int = COMPRESS_THRESHOLD,
) -> str:
    """Human-readable size, optionally marked when above the review thresholds.

    >>> format_file_size(1536)
    '2 KB'
    """
    if size < 1024:
        text = f"{size} B"
    elif size < 1024 * 1024:
        text = f"{_round(Decimal(size) / 1024, '1')} KB"
    else:
        text = f"{_round(Decimal(size) / (1024 * 1024), '0.1')} MB"

    if show_indicator:
        if size > size_limit:
            return f"{text} ⚠️"
        if size > compress_threshold:
            return f"{text} 📦"
    return text


def _round(value: Decimal, exponent: str) -> Decimal:
    return value.quantize(Decimal(exponent), rounding=ROUND_HALF_UP)


def extract_key_code_sections(content: str) -> str:
    sections = []
    imports = _IMPORT_LINE.findall(content)
    if imports:
        sections.append("\n".join(line.strip("\n") for line in imports[:50]))
    for pattern in (_EXPORT_LINE, _DECLARATION, _ARROW_FUNCTION):
        lines = pattern.findall(content)
        if lines:
            sections.append("\n".join(line.strip("\n") for line in lines))

    extracted = "\n\n".join(sections)
    if len(extracted.strip()) < 200:
        head = content[: SMALL_FILE_THRESHOLD]
        return f"{extracted}\n\n// --- Context Head ---\n{head}".strip()
    return extracted


def prepare_upload(
    filename: str,
    data: bytes,
    *,
    size_limit: int = SIZE_LIMIT,
    small_file_threshold: int = SMALL_FILE_THRESHOLD,
) -> UploadedFile:
    """Decode an uploaded file, reducing oversized code files to their outline."""
    text = data.decode("utf-8", errors="replace")
    extension = file_extension(filename)
    size = len(data)
    preprocessed = False

    if size > small_file_threshold and extension in REDUCIBLE_EXTENSIONS and size > size_limit:
        reduced = extract_key_code_sections(text)
        if len(reduced) != len(text):
            text = reduced
            size = len(reduced.encode("utf-8"))
            preprocessed = True

    return UploadedFile(
        id=str(uuid.uuid4()),
        name=filename,
        size=size,
        extension=extension,
        content=text,
        preprocessed=preprocessed,
    )
