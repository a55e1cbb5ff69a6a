import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from .errors import ConversionFailed, ConversionTimeout
from .interfaces import ConverterGateway, StagingGateway

logger = logging.getLogger(__name__)


class TempDirStaging(StagingGateway):
    """Per-request staging directories under the system temp dir (or ``base_dir``)."""

    def __init__(self, base_dir: str | None = None, prefix: str = "word2pdf") -> None:
        self._base = base_dir
        self._prefix = prefix

    def create(self) -> Path:
        return Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._base))

    def remove(self, directory: Path) -> None:
        shutil.rmtree(directory, ignore_errors=True)
        if directory.exists():
            logger.warning("staging directory %s could not be fully removed", directory)


class LibreOfficeConverter(ConverterGateway):
    def __init__(self, binary: str = "libreoffice", *, timeout: float | None = None) -> None:
        self._binary = binary
        self._timeout = timeout

    def command(self, input_path: Path, output_dir: Path) -> list[str]:
        # Only the staged path varies; everything else is fixed server-side.
        return [
            self._binary,
            "--headless",
            "--convert-to", "pdf",
            "--outdir", str(output_dir),
            str(input_path),
        ]

    def convert_to_pdf(self, input_path: Path, output_dir: Path) -> str:
        cmd = self.command(input_path, output_dir)
        logger.info("running converter: %s", cmd)
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = _decode(e.output)
            logger.error("converter timed out after %ss, output: %s", self._timeout, output)
            raise ConversionTimeout(
                f"PDF conversion timed out after {self._timeout} seconds", details=output
            ) from e
        except OSError as e:
            logger.error("could not start converter %s: %s", self._binary, e)
            raise ConversionFailed("PDF conversion failed", details=str(e)) from e

        output = _decode(proc.stdout)
        if proc.returncode != 0:
            logger.error("converter exited with %s, output: %s", proc.returncode, output)
            raise ConversionFailed("PDF conversion failed", details=output)
        if output:
            logger.info("converter output: %s", output.strip())
        return output


def _decode(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    return raw.decode("utf-8", errors="replace")
