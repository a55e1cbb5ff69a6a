from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class ConverterGateway(Protocol):
    def convert_to_pdf(self, input_path: Path, output_dir: Path) -> str:
        """Convert ``input_path`` to PDF, writing into ``output_dir``.

        Blocks until the converter exits and returns its combined output.
        Raises ConversionFailed when the converter cannot run or fails.
        """


class StagingGateway(Protocol):
    def create(self) -> Path:
        ...

    def remove(self, directory: Path) -> None:
        ...


@dataclass(frozen=True)
class StagedUpload:
    staging_dir: Path
    input_path: Path
    stem: str
    size_bytes: int

    @property
    def download_name(self) -> str:
        return f"{self.stem}.pdf"

    def output_candidates(self) -> tuple[Path, Path]:
        return (
            self.staging_dir / f"{self.stem}_output.pdf",
            self.staging_dir / f"{self.stem}.pdf",
        )
