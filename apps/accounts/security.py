"""Current-principal helpers and authority constants."""

# Login reported for requests without an authenticated account
ANONYMOUS_USER = 'anonymoususer'

ADMIN = 'ROLE_ADMIN'
USER = 'ROLE_USER'


def get_current_login(request) -> str:
    """
    Return the login of the account behind `request`.

    Falls back to ANONYMOUS_USER when nobody is authenticated, so callers
    can pass the result straight into the account services.
    """
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return ANONYMOUS_USER
    return user.get_username()
