"""Custom exceptions for the Workroom production file organizer."""


class WorkroomError(Exception):
    """Base exception for workroom errors."""
    pass


class FileSystemError(WorkroomError):
    """Exception for file system related errors."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class PathNotFoundError(FileSystemError):
    """Exception for path not found errors."""
    pass


class PermissionDeniedError(FileSystemError):
    """Exception for file permission errors."""
    pass


class AlreadyExistsError(FileSystemError):
    """Raised when a destination path is already taken."""
    pass


class TemplateMissingError(FileSystemError):
    """Raised when a template source file is absent."""
    pass


class ParseError(WorkroomError):
    """Exception for malformed filenames or descriptor content."""
    pass


class NotVersionedError(ParseError):
    """Raised when a filename does not carry a ``_v###`` suffix."""
    pass


class DescriptorError(ParseError):
    """Raised when a project, task or template descriptor cannot be read."""
    pass


class ValidationError(WorkroomError):
    """Exception for data validation errors."""
    pass


class InvalidVersionError(ValidationError):
    """Raised for versions outside the three digit range."""
    pass


class DuplicateClientError(ValidationError):
    """Raised when a client name or short name is already registered."""
    pass


class SelectionError(WorkroomError):
    """Base exception for operations that need an active selection."""
    pass


class NoSelectionError(SelectionError):
    """Raised when no project or task is selected."""
    pass


class NotFoundError(SelectionError):
    """Raised when a named project, task or template does not exist."""
    pass


class ConfigurationError(WorkroomError):
    """Exception for configuration related errors."""
    pass
