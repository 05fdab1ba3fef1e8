from datetime import datetime


def get_human_timestamp(timestamp: float | None = None) -> str:
    """
    Format a POSIX timestamp (default: now) as local time, to the second.
    """
    moment = datetime.now() if timestamp is None else datetime.fromtimestamp(timestamp)
    return moment.replace(microsecond=0).strftime("%Y-%m-%d %H:%M:%S")
