"""Domain-specific errors for botctl.

Every error names the step that failed through its ``step`` attribute so a
caller can tell radio problems (adapter/connect) from protocol problems
(discovery/write) and device-side problems (response).
"""


class BotctlError(Exception):
    """Base error for botctl."""

    step = "general"


class ConfigLoadError(BotctlError):
    """Raised when reading the settings file fails."""

    step = "config"


class ConfigValidationError(BotctlError):
    """Raised when the settings file does not conform to schema or semantics."""

    step = "config"


class AdapterUnavailableError(BotctlError):
    """Raised when the Bluetooth adapter cannot be used for scanning or connecting."""

    step = "adapter"


class DeviceSelectionError(BotctlError):
    """Raised when a device hint cannot resolve a single target."""

    step = "selection"


class ConnectError(BotctlError):
    """Raised on BLE connect failures."""

    step = "connect"


class SessionBusyError(ConnectError):
    """Raised when a device already has an open session."""


class SessionClosedError(ConnectError):
    """Raised when a disconnected session is used again."""


class DiscoveryError(BotctlError):
    """Base error for GATT discovery failures."""

    step = "discovery"


class ServiceNotFoundError(DiscoveryError):
    """Raised when the communication service is absent."""


class CharacteristicNotFoundError(DiscoveryError):
    """Raised when the notify/write characteristics are absent."""


class DescriptorNotFoundError(DiscoveryError):
    """Raised when the notification-enable descriptor is absent."""


class WriteError(BotctlError):
    """Raised when a characteristic or descriptor write fails."""

    step = "write"


class ResponseError(BotctlError):
    """Base error for response handling."""

    step = "response"


class ResponseTimeoutError(ResponseError):
    """Raised when no notification arrives before the deadline."""


class ResponseStatusError(ResponseError):
    """Raised when the device answers with a non-success status byte."""

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"Device reported status 0x{status:02x}")


class MalformedFrameError(ResponseError):
    """Raised when a response frame is too short to decode."""
