import re
from dataclasses import dataclass

from app.core.errors import InvalidRange

_RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int  # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, file_size: int) -> str:
        return f"bytes {self.start}-{self.end}/{file_size}"


def parse_range_header(header: str | None, file_size: int) -> ByteRange | None:
    """Parse a single ``Range: bytes=...`` header against a file size.

    Accepted forms are ``bytes=start-end``, ``bytes=start-`` (to end of file)
    and ``bytes=-n`` (the last n bytes). Returns None when no header was sent.

    Raises:
        InvalidRange: the header is malformed, asks for several ranges, or
            falls outside ``0 <= start <= end < file_size``.
    """
    if header is None or not header.strip():
        return None

    match = _RANGE_RE.match(header)
    if not match:
        raise InvalidRange(file_size)

    start_s, end_s = match.groups()
    if not start_s and not end_s:
        raise InvalidRange(file_size)

    if not start_s:
        suffix = int(end_s)
        if suffix == 0 or file_size == 0:
            raise InvalidRange(file_size)
        start = max(file_size - suffix, 0)
        end = file_size - 1
    else:
        start = int(start_s)
        end = int(end_s) if end_s else file_size - 1

    if start > end or end >= file_size:
        raise InvalidRange(file_size)
    return ByteRange(start, end)
