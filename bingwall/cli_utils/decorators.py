"""
bingwall Decorators

Decorators shared by bingwall commands. catch_errors turns any fatal error raised while
fetching or applying the daily image into a single formatted failure message and a non-zero
exit status, instead of a traceback.
"""

import sys
from functools import wraps

from bingwall.cli_utils.console import fail


def catch_errors(func):
    """
    Catch and format errors with the "fail" console template and gracefully
    exit the application with an error code.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as error:
            fail(str(error))
            sys.exit(1)

    return wrapper
