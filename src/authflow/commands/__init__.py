"""Built-in CLI sub-commands for authflow.

* :mod:`~authflow.commands.actions` -- ``login``, ``register``, ``logout``,
  ``request-pass``, ``reset-pass``, and ``refresh-token``.
* :mod:`~authflow.commands.config` -- inspect the effective configuration.

Action commands are plain callbacks registered directly on the root app;
``config`` is a :class:`typer.Typer` sub-application.
"""
