import stat
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from word2pdf.config import Settings
from word2pdf.conversion import ConversionFailed, ConversionService
from word2pdf.conversion.adapters import TempDirStaging
from word2pdf.webapi import create_app

PDF_BYTES = b"%PDF-1.4\n% fake pdf body\n%%EOF\n"


class FakeConverter:
    """Stands in for LibreOffice; writes a PDF using the chosen naming style."""

    def __init__(self, naming: str | None = "plain", fail_with: str | None = None) -> None:
        self.naming = naming
        self.fail_with = fail_with
        self.calls: list[tuple[Path, Path]] = []

    def convert_to_pdf(self, input_path: Path, output_dir: Path) -> str:
        self.calls.append((input_path, output_dir))
        if self.fail_with is not None:
            raise ConversionFailed("PDF conversion failed", details=self.fail_with)
        stem = input_path.name.rsplit(".", 1)[0]
        if self.naming == "suffixed":
            (output_dir / f"{stem}_output.pdf").write_bytes(PDF_BYTES)
        elif self.naming == "plain":
            (output_dir / f"{stem}.pdf").write_bytes(PDF_BYTES)
        return "convert done"


@pytest.fixture
def staging_root(tmp_path: Path) -> Path:
    root = tmp_path / "staging"
    root.mkdir()
    return root


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def service(converter: FakeConverter, staging_root: Path) -> ConversionService:
    return ConversionService(converter, TempDirStaging(base_dir=str(staging_root)))


@pytest.fixture
def client(service: ConversionService):
    app = create_app(settings=Settings(), service=service)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_stub(tmp_path: Path):
    """Write an executable shell script standing in for the converter binary."""

    def _make(body: str, name: str = "fake-libreoffice") -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


# $5 is the --outdir value, $6 the staged input file
WRITES_PDF = """name=$(basename "$6")
printf '%%PDF-1.4 stub\\n' > "$5/${name%.*}.pdf"
echo "convert $6 -> $5"
"""
