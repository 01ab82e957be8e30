"""Tests for zip member access."""

import struct
import zipfile
from pathlib import Path

import pytest
from fixtures import build_package

from xlsx_reader.config import Settings
from xlsx_reader.services.package_reader import PackageReader
from xlsx_reader.utils.exceptions import ErrorCode, MemberNotFoundError, PackageIOError

CENTRAL_DIRECTORY_SIGNATURE = b"PK\x01\x02"
# Offset of the uncompressed size field within a central directory entry
UNCOMPRESSED_SIZE_OFFSET = 24


def _inflate_recorded_size(path: Path, extra: int) -> None:
    """Make the central directory claim ``extra`` more bytes than stored."""
    data = bytearray(path.read_bytes())
    entry = data.rfind(CENTRAL_DIRECTORY_SIGNATURE)
    field_at = entry + UNCOMPRESSED_SIZE_OFFSET
    (size,) = struct.unpack_from("<I", data, field_at)
    struct.pack_into("<I", data, field_at, size + extra)
    path.write_bytes(bytes(data))


class TestOpen:
    """Tests for opening packages."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PackageIOError) as exc_info:
            PackageReader(tmp_path / "missing.xlsx")
        assert exc_info.value.error_code == ErrorCode.PACKAGE_OPEN_FAILED

    def test_not_a_zip(self, tmp_path: Path) -> None:
        path = tmp_path / "plain.xlsx"
        path.write_text("not a zip archive")
        with pytest.raises(PackageIOError) as exc_info:
            PackageReader(path)
        assert exc_info.value.details["package_path"] == str(path)

    def test_lists_members(self, tmp_path: Path) -> None:
        path = build_package(tmp_path / "p.xlsx", {"a.xml": "<a/>", "b/c.xml": "<c/>"})
        with PackageReader(path) as reader:
            assert sorted(reader.member_names()) == ["a.xml", "b/c.xml"]
            assert reader.has_member("b/c.xml")
            assert not reader.has_member("c.xml")


class TestReadMember:
    """Tests for reading members."""

    def test_reads_whole_member(self, tmp_path: Path) -> None:
        path = build_package(tmp_path / "p.xlsx", {"a.xml": "<a>hello</a>"})
        with PackageReader(path) as reader:
            assert reader.read_member("a.xml") == b"<a>hello</a>"

    def test_streams_in_chunks(self, tmp_path: Path) -> None:
        payload = "<a>" + "x" * 5000 + "</a>"
        path = build_package(tmp_path / "p.xlsx", {"a.xml": payload})
        with PackageReader(path) as reader:
            chunks = list(reader.iter_member_chunks("a.xml", chunk_size=1024))
        assert len(chunks) > 1
        assert b"".join(chunks) == payload.encode()

    def test_missing_member(self, tmp_path: Path) -> None:
        path = build_package(tmp_path / "p.xlsx", {"a.xml": "<a/>"})
        with PackageReader(path) as reader:
            with pytest.raises(MemberNotFoundError) as exc_info:
                reader.read_member("xl/workbook.xml")
        assert exc_info.value.member == "xl/workbook.xml"
        assert isinstance(exc_info.value, PackageIOError)

    def test_size_mismatch(self, tmp_path: Path) -> None:
        path = build_package(
            tmp_path / "p.xlsx", {"a.xml": "<a>data</a>"}, compression=zipfile.ZIP_STORED
        )
        _inflate_recorded_size(path, extra=10)
        with PackageReader(path) as reader:
            with pytest.raises(PackageIOError) as exc_info:
                reader.read_member("a.xml")
        assert exc_info.value.error_code == ErrorCode.MEMBER_SIZE_MISMATCH
        assert exc_info.value.details["expected_bytes"] == len(b"<a>data</a>") + 10

    def test_member_too_large(self, tmp_path: Path) -> None:
        path = build_package(tmp_path / "p.xlsx", {"big.xml": "x" * (1024 * 1024 + 1)})
        with PackageReader(path, Settings(_env_file=None, max_member_size_mb=1)) as reader:
            with pytest.raises(PackageIOError) as exc_info:
                reader.read_member("big.xml")
        assert exc_info.value.error_code == ErrorCode.MEMBER_TOO_LARGE

    def test_read_after_close(self, tmp_path: Path) -> None:
        path = build_package(tmp_path / "p.xlsx", {"a.xml": "<a/>"})
        reader = PackageReader(path)
        reader.close()
        reader.close()
        assert reader.closed
        with pytest.raises(PackageIOError) as exc_info:
            reader.read_member("a.xml")
        assert exc_info.value.error_code == ErrorCode.PACKAGE_CLOSED
