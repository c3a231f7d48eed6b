from datetime import datetime, timezone

def utc_ms() -> int:
    return int(datetime.now(tz=timezone.utc).timestamp() * 1000)
