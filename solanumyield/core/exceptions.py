"""Error kinds raised by the growth engine.

Both errors subclass :class:`ValueError` so callers validating inputs the
usual way keep working; they abort the whole run and no partial trajectory is
ever returned.
"""


class ConfigError(ValueError):
    """Invalid simulation configuration or crop parameters."""


class DataError(ValueError):
    """Malformed or missing weather input over the simulated window."""
