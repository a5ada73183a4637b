"""Custom exceptions for archive decoding."""


class DecodeError(Exception):
    """Base class for errors that abort a whole decode."""

    pass


class ArchiveUnreadable(DecodeError):
    def __init__(self, message: str | None = None):
        self.message = (
            f"Archive unreadable: {message}" if message else "Archive unreadable"
        )
        super().__init__(self.message)


class NotAZipError(ArchiveUnreadable):
    """Raised when the input bytes are not a ZIP container."""

    pass


class DatabaseNotFoundError(ArchiveUnreadable):
    """Raised when no ``Database.sqlite`` member exists in the archive."""

    def __init__(self, suffix: str):
        self.suffix = suffix
        super().__init__(f"{suffix} not found in the ZIP archive")


class DatabaseCorrupt(DecodeError):
    def __init__(self, message: str | None = None):
        self.message = (
            f"Database corrupt: {message}" if message else "Database corrupt"
        )
        super().__init__(self.message)


class MemberNotFoundError(LookupError):
    """Raised when a ZIP member path is not present in the archive."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Member not found: {path}")
