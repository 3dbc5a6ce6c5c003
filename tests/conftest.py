"""Test configuration and fixtures."""

from uuid import uuid4

from geist.domain.value import IdentityProvider, ProviderAccount, UserId


def make_account(
    provider: IdentityProvider = IdentityProvider.GOOGLE,
    provider_user_id: str | None = None,
    **fields,
) -> ProviderAccount:
    """Helper to build a provider account for linking.

    Args:
        provider: Provider the account belongs to
        provider_user_id: Provider-side ID (random if omitted)
        fields: Any other ProviderAccount fields

    Returns:
        ProviderAccount value object
    """
    return ProviderAccount(
        provider=provider,
        provider_user_id=provider_user_id or f"{provider.value}-{uuid4().hex[:12]}",
        **fields,
    )


def new_user_id() -> UserId:
    """Helper to generate a fresh user ID."""
    return UserId(uuid4())
