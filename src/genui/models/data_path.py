"""
Data paths.

A DataPath addresses a location in a surface's data model:
/user/addresses[0]/city is field "user", field "addresses", index 0,
field "city".
"""

import re
from dataclasses import dataclass
from typing import Iterator

Segment = str | int
"""A field name (str) or a list index (int >= 0)"""

# Trailing "[n]" groups on a token, e.g. "items[0][1]"
_INDEXED_TOKEN = re.compile(r"(.*?)((?:\[\d+\])+)")
_INDEX = re.compile(r"\[(\d+)\]")


@dataclass(frozen=True)
class DataPath:
    """
    Immutable, hashable path into a data model.

    Absolute paths render with a leading "/" and resolve to themselves;
    relative paths are joined onto a base path.
    """

    segments: tuple[Segment, ...] = ()
    absolute: bool = True

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> "DataPath":
        """
        Parse path text.

        Empty tokens are ignored, so "", "/" and "//" all have no segments.
        A token with malformed brackets ("a[", "a[x]", "a[-1]") is taken as
        a plain field name.
        """
        segments: list[Segment] = []
        for token in text.split("/"):
            if not token:
                continue
            match = _INDEXED_TOKEN.fullmatch(token)
            if match is None:
                segments.append(token)
                continue
            field, groups = match.groups()
            if field:
                segments.append(field)
            segments.extend(int(index) for index in _INDEX.findall(groups))
        return cls(tuple(segments), absolute=text.startswith("/"))

    @classmethod
    def root(cls) -> "DataPath":
        return cls((), absolute=True)

    @classmethod
    def of(cls, *segments: Segment, absolute: bool = True) -> "DataPath":
        """Build a path from raw segments."""
        for segment in segments:
            if isinstance(segment, bool) or not isinstance(segment, (str, int)):
                raise TypeError(f"Invalid path segment: {segment!r}")
            if isinstance(segment, int) and segment < 0:
                raise ValueError(f"Negative index in path: {segment}")
        return cls(tuple(segments), absolute=absolute)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def join(self, other: "DataPath | str") -> "DataPath":
        """Append the segments of other to this path."""
        if isinstance(other, str):
            other = DataPath.parse(other)
        return DataPath(self.segments + other.segments, absolute=self.absolute)

    def child(self, segment: Segment) -> "DataPath":
        return DataPath(self.segments + (segment,), absolute=self.absolute)

    def resolve(self, base: "DataPath") -> "DataPath":
        """Absolute paths stay as they are; relative ones are joined onto base."""
        if self.absolute:
            return self
        return base.join(self)

    def as_absolute(self) -> "DataPath":
        if self.absolute:
            return self
        return DataPath(self.segments, absolute=True)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def starts_with(self, prefix: "DataPath") -> bool:
        """Segment-wise prefix test (a path starts with itself)."""
        count = len(prefix.segments)
        return self.segments[:count] == prefix.segments

    @property
    def parent(self) -> "DataPath | None":
        """Path without its last segment, or None at the root."""
        if not self.segments:
            return None
        return DataPath(self.segments[:-1], absolute=self.absolute)

    @property
    def last(self) -> Segment | None:
        return self.segments[-1] if self.segments else None

    @property
    def is_root(self) -> bool:
        return not self.segments

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __str__(self) -> str:
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, int):
                if not parts:
                    parts.append("")
                parts[-1] += f"[{segment}]"
            else:
                parts.append(segment)
        rendered = "/".join(parts)
        if self.absolute:
            return "/" + rendered
        return rendered

    def __repr__(self) -> str:
        return f"DataPath({str(self)!r})"
