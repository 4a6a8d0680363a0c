"""Time window utilities"""

SECONDS_PER_DAY = 24 * 60 * 60


def start_of_day(epoch_seconds: int) -> int:
    """Floor a UTC epoch timestamp to midnight of the same day"""
    return epoch_seconds - (epoch_seconds % SECONDS_PER_DAY)
