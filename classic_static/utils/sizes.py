"""Human-readable file sizes."""

UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(size_bytes: int | None) -> str:
    """Format a byte count with base-1024 units, e.g. ``1.50 KB``.

    ``None`` (directories, entries whose size could not be read) renders
    as ``-``.
    """
    if size_bytes is None:
        return "-"
    if size_bytes <= 0:
        return "0 B"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {UNITS[unit]}"
