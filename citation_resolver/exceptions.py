"""Custom exception hierarchy for the citation resolver."""


class ResolverError(Exception):
    """Base exception for citation resolver errors."""


class ConfigError(ResolverError):
    """Raised when configuration is invalid or incomplete."""


class ProviderError(ResolverError):
    """Raised when an external metadata provider cannot answer a request."""


class InputError(ResolverError):
    """Raised when an input file or record cannot be interpreted."""
