"""Access to the members of a zip-packaged spreadsheet.

The archive handle is opened once and retained until ``close()``. Members
are read either whole (``read_member``) or as a stream of decompressed
chunks (``iter_member_chunks``). Both verify that the number of bytes
produced matches the uncompressed size recorded in the archive directory.
"""

import os
import threading
import zipfile
import zlib
from collections.abc import Generator
from types import TracebackType

from xlsx_reader.config import Settings
from xlsx_reader.config import settings as default_settings
from xlsx_reader.utils.exceptions import (
    ErrorCode,
    MemberNotFoundError,
    PackageIOError,
)
from xlsx_reader.utils.logging import get_logger

logger = get_logger(__name__)

_READ_ERRORS = (zipfile.BadZipFile, EOFError, zlib.error, OSError)


class PackageReader:
    """Read named members from a zip package.

    Reads go through a lock so a single reader can be shared by threads
    decoding different worksheets.
    """

    def __init__(
        self, path: str | os.PathLike[str], settings: Settings | None = None
    ) -> None:
        """Open the archive.

        Args:
            path: Filesystem path of the package.
            settings: Reader settings; the module defaults are used if None.

        Raises:
            PackageIOError: If the file is missing, unreadable, or not a zip.
        """
        self.path = os.fspath(path)
        self._settings = settings or default_settings
        self._lock = threading.Lock()

        try:
            self._archive: zipfile.ZipFile | None = zipfile.ZipFile(self.path)
        except FileNotFoundError as exc:
            raise PackageIOError(
                f"Package not found: {self.path}",
                error_code=ErrorCode.PACKAGE_OPEN_FAILED,
                package_path=self.path,
            ) from exc
        except (zipfile.BadZipFile, OSError) as exc:
            raise PackageIOError(
                f"Cannot open package: {exc}",
                error_code=ErrorCode.PACKAGE_OPEN_FAILED,
                package_path=self.path,
            ) from exc

        self._members = {info.filename: info for info in self._archive.infolist()}
        logger.debug("Opened package", path=self.path, members=len(self._members))

    def __enter__(self) -> "PackageReader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._archive is None

    def close(self) -> None:
        """Release the archive handle. Safe to call more than once."""
        with self._lock:
            if self._archive is not None:
                self._archive.close()
                self._archive = None

    def has_member(self, name: str) -> bool:
        return name in self._members

    def member_names(self) -> list[str]:
        return list(self._members)

    def read_member(self, name: str) -> bytes:
        """Read a whole member into memory.

        Raises:
            MemberNotFoundError: If the member does not exist.
            PackageIOError: If the member is corrupt, truncated, or too large.
        """
        return b"".join(self.iter_member_chunks(name))

    def iter_member_chunks(
        self, name: str, chunk_size: int | None = None
    ) -> Generator[bytes, None, None]:
        """Stream a member as decompressed chunks.

        The size check runs once the member is exhausted, so a consumer that
        stops early never sees a mismatch error.

        Args:
            name: Member name, e.g. ``"xl/worksheets/sheet1.xml"``.
            chunk_size: Bytes per chunk; defaults to ``read_chunk_size``.

        Yields:
            Non-empty byte strings.

        Raises:
            MemberNotFoundError: If the member does not exist.
            PackageIOError: If the member is corrupt, truncated, or too large.
        """
        info = self._member_info(name)
        size = chunk_size or self._settings.read_chunk_size

        with self._lock:
            archive = self._require_open(name)
            try:
                stream = archive.open(info)
            except _READ_ERRORS as exc:
                raise self._read_error(name, exc) from exc

        total = 0
        try:
            while True:
                with self._lock:
                    try:
                        chunk = stream.read(size)
                    except _READ_ERRORS as exc:
                        raise self._read_error(name, exc) from exc
                if not chunk:
                    break
                total += len(chunk)
                yield chunk
        finally:
            stream.close()

        if total != info.file_size:
            raise PackageIOError(
                f"Read {total} bytes from {name}, expected {info.file_size}",
                error_code=ErrorCode.MEMBER_SIZE_MISMATCH,
                package_path=self.path,
                member=name,
                details={"bytes_read": total, "expected_bytes": info.file_size},
            )

    def _member_info(self, name: str) -> zipfile.ZipInfo:
        info = self._members.get(name)
        if info is None:
            raise MemberNotFoundError(name, package_path=self.path)
        limit = self._settings.max_member_size_bytes
        if info.file_size > limit:
            raise PackageIOError(
                f"Member {name} is {info.file_size} bytes, limit is {limit}",
                error_code=ErrorCode.MEMBER_TOO_LARGE,
                package_path=self.path,
                member=name,
            )
        return info

    def _require_open(self, name: str) -> zipfile.ZipFile:
        if self._archive is None:
            raise PackageIOError(
                f"Package is closed, cannot read {name}",
                error_code=ErrorCode.PACKAGE_CLOSED,
                package_path=self.path,
                member=name,
            )
        return self._archive

    def _read_error(self, name: str, exc: Exception) -> PackageIOError:
        logger.error("Member read failed", member=name, error=str(exc))
        return PackageIOError(
            f"Cannot read member {name}: {exc}",
            error_code=ErrorCode.MEMBER_READ_FAILED,
            package_path=self.path,
            member=name,
        )
