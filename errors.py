class ConfigurationError(ValueError):
    """Invalid search instance: bad field, code length, mapping or input file."""
