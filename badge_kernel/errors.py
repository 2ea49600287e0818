"""Errors raised by the badge engine."""


class ConfigurationError(ValueError):
    """A badge configuration violates a structural invariant.

    Raised only from configuration intake, before any engine state is
    touched.
    """
