import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .errors import (
    ConversionError,
    InvalidRequest,
    OutputNotFound,
    PayloadTooLarge,
    StagingFailed,
    StorageError,
    UnsupportedFileType,
)
from .interfaces import ConverterGateway, StagedUpload, StagingGateway

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx"})

CHUNK = 1024 * 1024


def safe_basename(filename: str) -> str:
    """Strip any client-supplied directory components from ``filename``."""
    return filename.replace("\\", "/").rsplit("/", 1)[-1]


def split_extension(name: str) -> tuple[str, str]:
    """Split ``name`` into (stem, lowercase extension including the dot).

    The extension is everything from the last dot, so ``archive.tar.docx``
    gives ``("archive.tar", ".docx")`` and a name without a dot has an empty extension.
    """
    if "." not in name:
        return name, ""
    stem, ext = name.rsplit(".", 1)
    return stem, "." + ext.lower()


@dataclass(frozen=True)
class ConversionResult:
    upload: StagedUpload
    pdf_path: Path

    @property
    def staging_dir(self) -> Path:
        return self.upload.staging_dir

    @property
    def download_name(self) -> str:
        return self.upload.download_name


class ConversionService:
    """Orchestrates one office-to-PDF conversion.

    Framework-agnostic: validates the declared filename, stages the upload
    in a private directory, runs the converter and locates its output. On
    any failure the staging directory is removed before the error
    propagates; on success the caller owns it and must call ``cleanup``.
    """

    def __init__(
        self,
        converter: ConverterGateway,
        staging: StagingGateway,
        *,
        max_upload_mb: int = 300,
    ) -> None:
        self._converter = converter
        self._staging = staging
        self._max_bytes = max_upload_mb * 1024 * 1024
        self._max_upload_mb = max_upload_mb

    def validate(self, filename: str | None) -> tuple[str, str]:
        """Return (basename, stem) for an acceptable filename or raise."""
        name = safe_basename(filename or "")
        if not name:
            logger.warning("upload without a filename")
            raise InvalidRequest("No file uploaded")
        stem, ext = split_extension(name)
        logger.info("checking file type: %r", ext)
        if ext not in ALLOWED_EXTENSIONS:
            logger.warning("unsupported file type %r for %s", ext, name)
            raise UnsupportedFileType(
                "Unsupported file type. Please upload a Word, Excel or PowerPoint file."
            )
        return name, stem

    def convert(self, filename: str | None, stream: BinaryIO) -> ConversionResult:
        name, stem = self.validate(filename)

        try:
            staging_dir = self._staging.create()
        except OSError as e:
            logger.error("failed to create staging directory: %s", e)
            raise StagingFailed("Failed to create temporary directory") from e
        logger.info("created staging directory %s", staging_dir)

        try:
            upload = self._save_upload(staging_dir, name, stem, stream)
            self._converter.convert_to_pdf(upload.input_path, staging_dir)
            pdf_path = self.locate_output(upload)
        except BaseException:
            self.cleanup(staging_dir)
            raise
        return ConversionResult(upload=upload, pdf_path=pdf_path)

    def locate_output(self, upload: StagedUpload) -> Path:
        primary, fallback = upload.output_candidates()
        if primary.is_file():
            logger.info("found converted PDF at %s", primary)
            return primary
        logger.info("no PDF at %s, trying %s", primary, fallback)
        if fallback.is_file():
            logger.info("found converted PDF at %s", fallback)
            return fallback
        logger.error("converted PDF not found at %s or %s", primary, fallback)
        raise OutputNotFound("Converted PDF file not found")

    def cleanup(self, staging_dir: Path) -> None:
        self._staging.remove(staging_dir)
        logger.info("removed staging directory %s", staging_dir)

    def _save_upload(self, staging_dir: Path, name: str, stem: str, stream: BinaryIO) -> StagedUpload:
        input_path = staging_dir / name
        size_bytes = 0
        try:
            with input_path.open("wb") as f_out:
                while True:
                    chunk = stream.read(CHUNK)
                    if not chunk:
                        break
                    size_bytes += len(chunk)
                    if size_bytes > self._max_bytes:
                        raise PayloadTooLarge(f"upload exceeds {self._max_upload_mb} MB")
                    f_out.write(chunk)
        except ConversionError:
            logger.warning("upload %s rejected after %d bytes", name, size_bytes)
            raise
        except OSError as e:
            logger.error("failed to save upload %s: %s", input_path, e)
            raise StorageError("Failed to save uploaded file") from e
        logger.info("saved upload %s (%d bytes)", input_path, size_bytes)
        return StagedUpload(staging_dir=staging_dir, input_path=input_path, stem=stem, size_bytes=size_bytes)
