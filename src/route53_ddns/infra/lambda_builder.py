"""Build the deployment package for the webhook function.

The package is a zip of ``code_path`` (a single file or a directory). Entries
are sorted and stamped with a fixed timestamp so the same sources always
produce the same bytes, and therefore the same ``CODE_SHA256``. That hash is
stored in the function environment and compared during planning to detect
code changes without downloading the deployed code.
"""

import base64
import hashlib
import io
import zipfile
from dataclasses import dataclass
from pathlib import Path

from ..exceptions import ValidationError

# Earliest timestamp a zip entry can carry
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

EXCLUDED_DIRS = frozenset({"__pycache__", ".pytest_cache", ".mypy_cache", ".git"})


@dataclass(frozen=True)
class CodePackage:
    """A built deployment package."""

    zip_bytes: bytes
    sha256: str  # base64, same encoding as Lambda's CodeSha256

    @property
    def size_bytes(self) -> int:
        return len(self.zip_bytes)


def _collect_files(code_path: Path) -> list[tuple[str, Path]]:
    """List (archive name, source path) pairs in a stable order."""
    if code_path.is_file():
        return [(code_path.name, code_path)]

    result = []
    for file_path in code_path.rglob("*"):
        rel = file_path.relative_to(code_path)
        if not file_path.is_file() or EXCLUDED_DIRS.intersection(rel.parts):
            continue
        if file_path.suffix == ".pyc":
            continue
        result.append((rel.as_posix(), file_path))
    return sorted(result)


def build_package(code_path: str | Path) -> CodePackage:
    """Zip the function sources and hash the result.

    Args:
        code_path: A source file or a directory of sources

    Returns:
        CodePackage with the zip contents and its base64 SHA-256

    Raises:
        ValidationError: If code_path does not exist or contains no files
    """
    code_path = Path(code_path)
    if not code_path.exists():
        raise ValidationError("code_path", str(code_path), "does not exist")

    files = _collect_files(code_path)
    if not files:
        raise ValidationError("code_path", str(code_path), "contains no files")

    zip_buffer = io.BytesIO()
    with zipfile.ZipFile(zip_buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for arcname, file_path in files:
            info = zipfile.ZipInfo(arcname, date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            zf.writestr(info, file_path.read_bytes())

    zip_bytes = zip_buffer.getvalue()
    digest = base64.b64encode(hashlib.sha256(zip_bytes).digest()).decode("ascii")
    return CodePackage(zip_bytes=zip_bytes, sha256=digest)


def write_package(code_path: str | Path, output_path: str | Path) -> CodePackage:
    """Build the package and write the zip to a file.

    Args:
        code_path: A source file or a directory of sources
        output_path: Path where to write the zip file

    Returns:
        The CodePackage that was written
    """
    package = build_package(code_path)
    output_path = Path(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(package.zip_bytes)

    return package
