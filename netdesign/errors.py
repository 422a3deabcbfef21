class NetworkDesignError(Exception):
    """Base error for the network design assistant."""


class TopologyError(NetworkDesignError):
    """Raised when the generated graph would break its own invariants."""


class ExportError(NetworkDesignError):
    """Raised when an export format is unknown or rendering fails."""


class ChatProxyError(NetworkDesignError):
    """Raised when the chat-completion call fails or returns an unusable payload."""


class ChatConfigurationError(ChatProxyError):
    """Raised before any network call when the API credential is missing."""
