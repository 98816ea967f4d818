"""Row version counter shared by tours and staff members."""


def next_version(current: int | None) -> int:
    """Versions start at 0 on insert and go up by one on each update."""
    return 0 if current is None else current + 1
