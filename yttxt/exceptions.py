"""
yttxt.exceptions - Custom exception classes.

All yttxt-specific exceptions inherit from YttxtError.
"""


class YttxtError(Exception):
    """Base exception for all yttxt errors."""

    pass


class ConfigError(YttxtError):
    """Configuration loading or validation error."""

    pass


class InputError(YttxtError):
    """Input could not be resolved to a local file or video identifier."""

    pass


class DownloadError(YttxtError):
    """yt-dlp metadata lookup error."""

    pass


class PipelineError(YttxtError):
    """A pipeline stage exited with a non-zero status."""

    def __init__(self, stage: str, returncode: int, message: str | None = None):
        self.stage = stage
        self.returncode = returncode
        super().__init__(message or f"{stage} exited with status {returncode}")


class PipelineCancelled(YttxtError):
    """Pipeline was cancelled before completion."""

    pass


class CleanupError(YttxtError):
    """Transcript cleanup rule error."""

    pass


class DeliveryError(YttxtError):
    """Delivery sink misconfigured or unavailable."""

    pass


class ValidationError(YttxtError):
    """Data validation error."""

    pass


class DependencyError(YttxtError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
