class AnalyzerError(Exception):
    """Base exception for all batch analyzer errors."""


class ConfigurationError(AnalyzerError):
    """Raised when required configuration (e.g. the API key) is missing or invalid."""


class DirectoryUnreadable(AnalyzerError):
    """Raised when the images or results directory cannot be listed."""


class EncodingFailure(AnalyzerError):
    """Raised when an image file cannot be read or encoded."""


class AnalysisError(AnalyzerError):
    """Raised when the remote vision service call fails."""


class PersistFailure(AnalyzerError):
    """Raised when a result artifact cannot be written."""
