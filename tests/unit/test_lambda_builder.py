"""Tests for function package building."""

import io
import zipfile
from pathlib import Path

import pytest

from route53_ddns.exceptions import ValidationError
from route53_ddns.infra.lambda_builder import build_package, write_package


@pytest.fixture
def source(tmp_path: Path) -> Path:
    root = tmp_path / "handler"
    (root / "lib").mkdir(parents=True)
    (root / "index.py").write_text("def handler(event, context):\n    return {}\n")
    (root / "lib" / "util.py").write_text("X = 1\n")
    (root / "__pycache__").mkdir()
    (root / "__pycache__" / "index.cpython-312.pyc").write_bytes(b"\x00")
    return root


def _names(zip_bytes: bytes) -> list[str]:
    with zipfile.ZipFile(io.BytesIO(zip_bytes)) as zf:
        return zf.namelist()


class TestBuildPackage:
    """Tests for build_package."""

    def test_directory(self, source: Path) -> None:
        package = build_package(source)

        assert _names(package.zip_bytes) == ["index.py", "lib/util.py"]
        assert package.size_bytes == len(package.zip_bytes)

    def test_single_file(self, source: Path) -> None:
        package = build_package(source / "index.py")

        assert _names(package.zip_bytes) == ["index.py"]

    def test_hash_is_stable(self, source: Path) -> None:
        first = build_package(source)
        (source / "index.py").touch()
        second = build_package(source)

        assert first.sha256 == second.sha256
        assert first.zip_bytes == second.zip_bytes

    def test_hash_follows_content(self, source: Path) -> None:
        before = build_package(source)
        (source / "lib" / "util.py").write_text("X = 2\n")
        after = build_package(source)

        assert before.sha256 != after.sha256

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="does not exist"):
            build_package(tmp_path / "nope")

    def test_empty_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="contains no files"):
            build_package(tmp_path)


class TestWritePackage:
    """Tests for write_package."""

    def test_writes_zip(self, source: Path, tmp_path: Path) -> None:
        output = tmp_path / "dist" / "function.zip"

        package = write_package(source, output)

        assert output.read_bytes() == package.zip_bytes
