class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass


class TargetNotFoundError(Exception):
    """Raise if there is no contract bytecode at a configured address"""

    pass


class ScanError(Exception):
    """Raise if a log sub-range could not be fetched, the scan is never partial"""

    pass


class TooManyLoopsError(Exception):
    """Raise if a loop runs too many times"""

    pass
