class ConfigurationError(Exception):
    """
    Raised when the monitor cannot start with the given configuration.
    """
