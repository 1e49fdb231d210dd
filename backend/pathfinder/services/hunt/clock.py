"""Server-authoritative time source.

Every stored timestamp and every countdown is computed from this module so
that client clocks never influence elapsed time. Tests replace ``now``.
"""
import time


def now() -> float:
    return time.time()
