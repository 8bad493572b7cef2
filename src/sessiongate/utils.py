import time


def unix_now() -> int:
    """Current time in whole seconds since the epoch."""
    return int(time.time())
