"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~authflow.exceptions.AuthflowError` subclass.
Shell wrappers can inspect the exit code to tell a rejected login apart
from a network failure without parsing stderr.

Example::

    $ authflow login --email me@example.com --password-source env:PW
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the action produced a failed result
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The authentication action finished with a failed result."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
