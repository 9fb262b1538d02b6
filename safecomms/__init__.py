"""Python client for the SafeComms content-moderation API."""

__version__ = "0.1.0"

from safecomms.client import AsyncSafeCommsClient, SafeCommsClient  # noqa: E402
from safecomms.config import DEFAULT_BASE_URL, ClientConfig, resolve_config  # noqa: E402
from safecomms.errors import (  # noqa: E402
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    NetworkError,
    RateLimitError,
    SafeCommsError,
    ServerError,
    ValidationError,
)
from safecomms.models import (  # noqa: E402
    AddonUsage,
    ImageModerationOptions,
    ModerationIssue,
    ModerationOptions,
    ModerationResult,
    ReplaceSeverity,
    UsageReport,
)

__all__ = [
    "__version__",
    "SafeCommsClient",
    "AsyncSafeCommsClient",
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "resolve_config",
    "SafeCommsError",
    "ConfigurationError",
    "ValidationError",
    "NetworkError",
    "AuthenticationError",
    "RateLimitError",
    "ServerError",
    "DecodeError",
    "ModerationOptions",
    "ImageModerationOptions",
    "ReplaceSeverity",
    "ModerationResult",
    "ModerationIssue",
    "AddonUsage",
    "UsageReport",
]
