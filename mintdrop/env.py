import os
from typing import Optional

from dotenv import load_dotenv
from mintdrop.errors import MissingEnvironmentVariableException

load_dotenv()


def env_var(accessor: str) -> str:
    """
    Attempt to fetch an environment variable and throw
    an error if not found
    """
    var = os.environ.get(accessor)
    if not var:
        raise MissingEnvironmentVariableException(accessor)
    return var


def optional_env_var(*accessors: str, default: Optional[str] = None) -> Optional[str]:
    """Return the first of `accessors` that is set, or `default`"""
    for accessor in accessors:
        var = os.environ.get(accessor)
        if var:
            return var
    return default
