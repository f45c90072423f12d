class FileReadingError(Exception):
    """Raised when an input file cannot be read or parsed into rows."""

    pass


class FileContentError(Exception):
    """Raised when the content of a file is not as expected."""

    pass


class ExportBlockedError(Exception):
    """Raised when an export is attempted while error-severity findings exist."""

    def __init__(self, error_count: int):
        self.error_count = error_count
        super().__init__(
            f"Export blocked: {error_count} validation error(s) must be fixed first"
        )
