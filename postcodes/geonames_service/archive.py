"""Extraction of the data file from a GeoNames zip archive."""

import io
import zipfile
import zlib

from postcodes.geonames_service.errors import (
    ExtractionError,
    MalformedArchive,
    MemberNotFound,
)
from postcodes.logging_config import logger


def member_filename(country_code: str) -> str:
    return f"{country_code}.txt"


def unzip_member(data: bytes, filename: str) -> bytes:
    """Return the decompressed contents of one archive member.

    Args:
        data: Zip archive bytes.
        filename: Exact member name to look for; the first match wins.

    Returns:
        The member's decompressed bytes.

    Raises:
        MalformedArchive: If the bytes are not a zip archive.
        MemberNotFound: If no member has the given name.
        ExtractionError: If the member cannot be decompressed.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (
        zipfile.BadZipFile,
        NotImplementedError,
        ValueError,
        OSError,
        EOFError,
    ) as exc:
        logger.error("ARCHIVE_MALFORMED", size=len(data), error=str(exc))
        raise MalformedArchive(f"create unzipping reader: {exc}") from exc

    with archive:
        member = next(
            (info for info in archive.infolist() if info.filename == filename), None
        )
        if member is None:
            logger.error("ARCHIVE_MEMBER_MISSING", filename=filename)
            raise MemberNotFound(filename)

        try:
            with archive.open(member) as handle:
                contents = handle.read()
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,
            RuntimeError,
            ValueError,
            OSError,
        ) as exc:
            logger.error("ARCHIVE_EXTRACTION_FAILED", filename=filename, error=str(exc))
            raise ExtractionError(filename) from exc

    logger.info("ARCHIVE_MEMBER_EXTRACTED", filename=filename, size=len(contents))
    return contents
