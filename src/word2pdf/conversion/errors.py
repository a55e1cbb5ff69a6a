class ConversionError(Exception):
    """Base class for failures of a single conversion request.

    Each subclass fixes the error ``kind`` and the HTTP status the web layer
    answers with. ``details`` carries diagnostic text (e.g. converter output)
    that is reported to the client but never interpreted.
    """

    kind = "conversion-error"
    status_code = 500

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, str]:
        body = {"error": self.message, "code": self.kind}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(ConversionError):
    kind = "invalid-request"
    status_code = 400


class UnsupportedFileType(ConversionError):
    kind = "unsupported-type"
    status_code = 400


class PayloadTooLarge(ConversionError):
    kind = "payload-too-large"
    status_code = 413


class StagingFailed(ConversionError):
    kind = "resource-exhaustion"
    status_code = 500


class StorageError(ConversionError):
    kind = "io-error"
    status_code = 500


class ConversionFailed(ConversionError):
    kind = "conversion-failure"
    status_code = 500


class ConversionTimeout(ConversionFailed):
    kind = "conversion-timeout"
    status_code = 504


class OutputNotFound(ConversionError):
    kind = "output-not-found"
    status_code = 500
