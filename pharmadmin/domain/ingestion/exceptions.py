"""Fatal ingestion errors. Anything raised from here aborts the whole run."""

from typing import Iterable, Optional


class IngestionError(Exception):
    """Base class for errors that make a source file unusable."""

    def __init__(self, message: str, file_name: Optional[str] = None):
        self.file_name = file_name
        self.message = message
        super().__init__(self.message)


class EmptyInputError(IngestionError):
    """Raised when a file has no lines or its first sheet has no rows."""

    def __init__(self, file_name: Optional[str] = None, message: str = None):
        super().__init__(
            message or f"Input file '{file_name or '<bytes>'}' is empty; nothing to import.",
            file_name=file_name,
        )


class UnreadableInputError(IngestionError):
    """Raised when file bytes cannot be decoded as text or as a workbook."""

    def __init__(self, reason: str, file_name: Optional[str] = None):
        self.reason = reason
        super().__init__(
            f"Cannot read input file '{file_name or '<bytes>'}': {reason}",
            file_name=file_name,
        )


class UnsupportedFileTypeError(IngestionError):
    """Raised when neither the extension nor the content identify a supported format."""

    def __init__(self, file_name: Optional[str], supported: Iterable[str]):
        self.supported = sorted(supported)
        super().__init__(
            f"Unsupported file type: {file_name or '<unknown>'} "
            f"(expected one of: {', '.join(self.supported)})",
            file_name=file_name,
        )


class MissingColumnsError(IngestionError):
    """Raised when the header row lacks every column a parser needs."""

    def __init__(self, required_any_of: Iterable[str], file_name: Optional[str] = None):
        self.required_any_of = list(required_any_of)
        super().__init__(
            "Header row must contain at least one of: "
            + ", ".join(f'"{name}"' for name in self.required_any_of),
            file_name=file_name,
        )


class FileTooLargeError(IngestionError):
    """Raised when a file exceeds the configured ingestion size limit."""

    def __init__(self, size_bytes: int, limit_mb: int, file_name: Optional[str] = None):
        self.size_bytes = size_bytes
        self.limit_mb = limit_mb
        super().__init__(
            f"File is {size_bytes / (1024 * 1024):.1f} MB; the limit is {limit_mb} MB.",
            file_name=file_name,
        )
