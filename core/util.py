from __future__ import annotations
import math, os, time, socket, pathlib, platform

UNKNOWN_ARCH = "unknown"

def now_ts() -> float:
    """
    Get current Unix timestamp.

    Returns:
        Current time as float seconds since epoch
    """
    return time.time()

def hostname() -> str:
    """
    Get system hostname, used as the node name label.

    Returns:
        Current system hostname as string
    """
    return socket.gethostname()

def cpu_arch() -> str:
    """
    Get the CPU architecture label of this machine.

    Returns:
        Machine type reported by the platform (e.g. 'x86_64'), or 'unknown'
    """
    return platform.machine() or UNKNOWN_ARCH

def ensure_parent(path: str | os.PathLike) -> None:
    """
    Create parent directories for a file path, if they don't exist.

    Args:
        path: File path whose parent directories should be created
    """
    pathlib.Path(path).parent.mkdir(parents=True, exist_ok=True)

def is_finite(value: int | float) -> bool:
    """True unless value is a NaN or infinite float."""
    return not (isinstance(value, float) and not math.isfinite(value))

def finite_int(value: int | float, default: int = 0) -> int:
    """
    Truncate a reading to int; NaN and infinities count as absent.

    Args:
        value: Numeric reading
        default: Value returned for non-finite input

    Returns:
        int(value), or default when value is not finite
    """
    if not is_finite(value):
        return default
    return int(value)
