"""
Domain layer for office-to-PDF conversion.
Provides interfaces (gateways), the error taxonomy and a service that
orchestrates a single conversion request, abstracting the filesystem and
the external converter so front-ends (HTTP or others) share the same logic.
"""

from .errors import (
    ConversionError,
    ConversionFailed,
    ConversionTimeout,
    InvalidRequest,
    OutputNotFound,
    PayloadTooLarge,
    StagingFailed,
    StorageError,
    UnsupportedFileType,
)
from .interfaces import ConverterGateway, StagingGateway, StagedUpload
from .service import ALLOWED_EXTENSIONS, ConversionResult, ConversionService, split_extension
