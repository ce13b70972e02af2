"""Authentication core for authflow.

The main entry points are:

- :class:`AuthResult` -- immutable outcome of one authentication action.
- :class:`AuthProvider` -- abstract base class for providers; owns the
  frozen, merged configuration.
- :class:`AuthManager` -- registry that maps provider names to provider
  instances and dispatches actions.
- :func:`create_default_manager` -- factory returning an :class:`AuthManager`
  with the email/password provider registered as ``"email"``.

Typical usage::

    from authflow.auth import create_default_manager
    from authflow.models import Action

    manager = create_default_manager(transport)
    result = await manager.run("email", Action.LOGIN, {"email": "me@example.com", "password": "pw"})
"""

from authflow.auth.base import AuthProvider, AuthResult
from authflow.auth.manager import AuthManager, create_default_manager

__all__ = [
    "AuthManager",
    "AuthProvider",
    "AuthResult",
    "create_default_manager",
]
