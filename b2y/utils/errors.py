"""Error handling utilities."""


class MarketplaceError(Exception):
    """Base exception for the B2Y marketplace backend."""
    pass


class SupabaseError(MarketplaceError):
    """Supabase operation error."""
    pass


class AuthenticationError(MarketplaceError):
    """Missing or invalid session."""
    pass


class AuthorizationError(MarketplaceError):
    """Caller is not allowed to touch the resource."""
    pass


class DescriptionError(MarketplaceError):
    """LLM description enhancement error."""
    pass
