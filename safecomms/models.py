"""Request options and response models for the SafeComms API.

Request options are frozen dataclasses whose fields default to ``None``
("not set"); only fields the caller set are serialized.  Response bodies
are validated with pydantic and accept both the service's camelCase keys
and snake_case keys.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt
from pydantic.alias_generators import to_camel


class ReplaceSeverity(Enum):
    """Lowest severity whose matches are redacted when ``replace`` is on."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


def _wire_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ---------------------------------------------------------------------------
# Request options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Options:
    # field name -> request key, for fields whose key differs
    _wire_names: ClassVar[dict[str, str]] = {}

    def merged(self, **overrides: Any):
        """Return a copy with every non-``None`` override applied."""
        present = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **present) if present else self

    def to_payload(self) -> dict[str, Any]:
        """Return the set fields only, keyed by their request names."""
        return {
            self._wire_names.get(f.name, f.name): _wire_value(getattr(self, f.name))
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class ModerationOptions(_Options):
    """Optional parameters for text moderation."""

    language: Optional[str] = None  # ISO code; server picks when unset
    replace: Optional[bool] = None
    pii: Optional[bool] = None
    replace_severity: Optional[ReplaceSeverity | str] = None
    moderation_profile_id: Optional[str] = None


@dataclass(frozen=True)
class ImageModerationOptions(_Options):
    """Optional parameters for image moderation.

    The image endpoints take camelCase keys in both JSON and multipart
    bodies.
    """

    _wire_names: ClassVar[dict[str, str]] = {
        "moderation_profile_id": "moderationProfileId",
        "enable_ocr": "enableOcr",
        "enhanced_ocr": "enhancedOcr",
        "extract_metadata": "extractMetadata",
    }

    language: Optional[str] = None
    moderation_profile_id: Optional[str] = None
    enable_ocr: Optional[bool] = None
    enhanced_ocr: Optional[bool] = None
    extract_metadata: Optional[bool] = None

    def to_form(self) -> dict[str, str]:
        """Return the set fields as multipart text parts."""
        form: dict[str, str] = {}
        for name, value in self.to_payload().items():
            if isinstance(value, bool):
                form[name] = "true" if value else "false"
            else:
                form[name] = str(value)
        return form


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )


class ModerationIssue(_WireModel):
    """A single flagged span."""

    term: Optional[str] = None
    context: Optional[str] = None


class AddonUsage(_WireModel):
    """Which paid add-ons were applied to the request."""

    replaced_unsafe: bool = False
    replaced_pii: bool = False


class ModerationResult(_WireModel):
    """Outcome of a text or image moderation call."""

    is_clean: StrictBool
    severity: Optional[str] = None
    category_scores: Optional[dict[str, Any]] = None
    issues: Optional[list[ModerationIssue]] = None
    reason: Optional[str] = None
    is_bypass_attempt: bool = False
    safe_content: Optional[str] = None
    addons: Optional[AddonUsage] = None


class UsageReport(_WireModel):
    """Point-in-time metering snapshot for the API key's account."""

    tokens_used: StrictInt
    tier: Optional[str] = None
    rate_limit: Optional[int] = None
    token_limit: Optional[int] = None
    remaining_tokens: Optional[int] = None


class ProblemDetails(_WireModel):
    """RFC 7807 error body returned on failed requests."""

    type: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    status: Optional[int] = None

    def message(self) -> str:
        return self.detail or self.title or ""
