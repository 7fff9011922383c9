class MusingError(Exception):
    """Base class for errors surfaced to the command line."""


class ConfigError(MusingError):
    """Project configuration is missing or malformed."""


class StartupError(MusingError):
    """A precondition for launching the dashboard is not met."""
