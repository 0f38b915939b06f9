from datetime import datetime


PRIMITIVES: tuple[type, ...] = (dict, datetime, str, float, int, bool)
""" Types the Mongo driver can store as-is. Matched by exact type, not by inheritance. """
