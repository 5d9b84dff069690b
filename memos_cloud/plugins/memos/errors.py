"""Error types for the MemOS Cloud plugin.

None of these are allowed to reach the host: the lifecycle hooks catch them
and downgrade them to a logged warning.
"""

from typing import List, Optional


class MemosError(Exception):
    """Base class for MemOS Cloud plugin errors."""

    pass


class ConfigurationIncompleteError(MemosError):
    """Settings lack the credential or user id needed to reach the service.

    Raised by require_credentials() so the recall and capture paths can
    skip the turn with a single warning.
    """

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [f"Missing MemOS Cloud settings: {', '.join(self.missing)}"]
        hints = {
            "apiKey": "  Set MEMOS_API_KEY or pass apiKey in the plugin config",
            "userId": "  Set MEMOS_USER_ID or pass userId in the plugin config",
        }
        fixes = [hints[name] for name in self.missing if name in hints]
        if fixes:
            lines.append("To fix:")
            lines.extend(fixes)
        return "\n".join(lines)


class AuthenticationMissingError(MemosError):
    """The API client was invoked without a credential.

    Raised before any network attempt is made.
    """

    def __init__(self, message: str = "Missing MEMOS API key (Token auth)"):
        super().__init__(message)


class TransportError(MemosError):
    """A request failed after all retry attempts.

    Covers network errors, timeouts, non-2xx responses and response bodies
    that are not valid JSON. Carries the HTTP status when there was one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        attempts: int = 0,
        path: Optional[str] = None,
    ):
        self.status_code = status_code
        self.attempts = attempts
        self.path = path
        super().__init__(message)
