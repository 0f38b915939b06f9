from typing import Any, Callable, TypeVar

from pymongo.errors import PyMongoError

from .logger import logger
from .validation_error import ValidationError


T = TypeVar('T')

Done = Callable[[BaseException | None, Any], None]
""" Error-first completion callback: done(error, result). """

FORWARDED_ERRORS = (PyMongoError, ValidationError, ValueError)
""" Errors that are reported through the callback instead of being raised. Anything else is a programming error and propagates. """

def complete(done: Done, operation: Callable[[], T], description: str) -> None:
	""" Runs the operation and reports its outcome to done.
	On failure the error is logged and passed to done unchanged, with None as the result. """
	try:
		result = operation()
	except FORWARDED_ERRORS as e:
		logger.error(f"{description} failed: {type(e).__name__}: {e}")
		done(e, None)
		return
	done(None, result)
