"""Size probes for decode sources."""

import os
import stat
from typing import Any

__all__ = ["probe_stream_size"]


def probe_stream_size(stream: Any) -> int | None:
    """Return the size in bytes of a file-backed stream.

    Only streams backed by a regular file are probed; the stream position
    is never moved.

    Parameters
    ----------
    stream : Any
        Readable object, typically an open binary file.

    Returns
    -------
    int | None
        Size in bytes, or None if it cannot be determined.
    """
    fileno = getattr(stream, "fileno", None)
    if fileno is None:
        return None
    try:
        file_stat = os.fstat(fileno())
    except (OSError, ValueError):
        # io.BytesIO raises UnsupportedOperation, closed files ValueError
        return None
    if not stat.S_ISREG(file_stat.st_mode):
        return None
    return file_stat.st_size
