"""Concrete authentication providers.

* :class:`EmailPassAuthProvider` -- configuration-driven email/password
  provider covering login, registration, logout, password request/reset,
  and token refresh.

See Also:
    :mod:`authflow.auth.base` for the provider interface contract.
"""

from authflow.providers.email_pass import EmailPassAuthProvider

__all__ = ["EmailPassAuthProvider"]
