"""Route pattern parsing and segment matching.

Pattern syntax::

    /users              literal
    /users/:email       named parameter, one non-empty segment
    /files/:path*       wildcard parameter, one or more segments

A wildcard may appear at most once per pattern and must be the last
segment or be followed by a literal segment. Parameter names are unique
within a pattern.
"""

from perch.errors import ConfigurationError
from perch.routing.route import Segment

PARAM_MARKER = ":"
WILDCARD_MARKER = "*"


def parse_pattern(pattern: str) -> tuple[Segment, ...]:
    """Parse a route pattern into segments.

    Examples::

        ""                  -> ()
        "/"                 -> ()
        "/users/:email"     -> (Segment("users"), Segment(":email", is_param=True, name="email"))
        "/files/:path*/raw" -> (Segment("files"), Segment(":path*", ..., is_wildcard=True),
                                Segment("raw"))

    Raises:
        ConfigurationError: If the pattern is malformed.
    """
    if pattern in ("", "/"):
        return ()
    if not pattern.startswith("/"):
        msg = f"Route pattern {pattern!r} must start with '/'."
        raise ConfigurationError(msg)

    segments: list[Segment] = []
    names: set[str] = set()
    wildcard = False
    for part in pattern[1:].split("/"):
        if (part.startswith("{") and part.endswith("}")) or (
            part.startswith("<") and part.endswith(">")
        ):
            msg = (
                f"Route pattern {pattern!r} uses {part!r}. "
                f"Write parameters as ':{part[1:-1]}' instead."
            )
            raise ConfigurationError(msg)

        if not part.startswith(PARAM_MARKER):
            segments.append(Segment(part))
            continue

        name = part[1:]
        is_wildcard = name.endswith(WILDCARD_MARKER)
        if is_wildcard:
            name = name[:-1]
        if not name or PARAM_MARKER in name or WILDCARD_MARKER in name:
            msg = f"Route pattern {pattern!r} has an invalid parameter {part!r}."
            raise ConfigurationError(msg)
        if name in names:
            msg = f"Route pattern {pattern!r} declares parameter {name!r} twice."
            raise ConfigurationError(msg)
        if segments and segments[-1].is_wildcard:
            msg = (
                f"Route pattern {pattern!r}: wildcard {segments[-1].value!r} "
                "must be followed by a literal segment, not a parameter."
            )
            raise ConfigurationError(msg)
        if is_wildcard and wildcard:
            msg = f"Route pattern {pattern!r} has more than one wildcard parameter."
            raise ConfigurationError(msg)

        names.add(name)
        wildcard = wildcard or is_wildcard
        segments.append(Segment(part, is_param=True, is_wildcard=is_wildcard, name=name))
    return tuple(segments)


def match_segments(
    segments: tuple[Segment, ...],
    parts: list[str],
) -> dict[str, str] | None:
    """Match path *parts* against *segments*. Returns captured params or ``None``.

    A wildcard followed by a literal stops at the earliest later
    occurrence of that literal which lets the rest of the path match.
    """
    params: dict[str, str] = {}
    if _match(segments, 0, parts, 0, params):
        return params
    return None


def _match(
    segments: tuple[Segment, ...],
    si: int,
    parts: list[str],
    pi: int,
    params: dict[str, str],
) -> bool:
    while si < len(segments):
        seg = segments[si]
        if seg.is_wildcard:
            return _match_wildcard(segments, si, parts, pi, params)
        if pi >= len(parts):
            return False
        part = parts[pi]
        if seg.is_param:
            if not part:
                return False
            params[seg.name or ""] = part
        elif seg.value != part:
            return False
        si += 1
        pi += 1
    return pi == len(parts)


def _match_wildcard(
    segments: tuple[Segment, ...],
    si: int,
    parts: list[str],
    pi: int,
    params: dict[str, str],
) -> bool:
    seg = segments[si]
    if si + 1 == len(segments):
        value = "/".join(parts[pi:])
        if not value:
            return False
        params[seg.name or ""] = value
        return True

    # Followed by a literal (enforced by parse_pattern)
    anchor = segments[si + 1].value
    for end in range(pi + 1, len(parts)):
        if parts[end] != anchor:
            continue
        captured = "/".join(parts[pi:end])
        if captured and _match(segments, si + 2, parts, end + 1, params):
            params[seg.name or ""] = captured
            return True
    return False


def overlaps(a: tuple[Segment, ...], b: tuple[Segment, ...]) -> bool:
    """True if some path could be matched by both segment lists.

    Approximate: used for registration warnings only.
    """
    if not a or not b:
        return not a and not b
    first_a, first_b = a[0], b[0]
    if first_a.is_wildcard or first_b.is_wildcard:
        wild, other = (a, b) if first_a.is_wildcard else (b, a)
        return any(overlaps(wild[1:], other[k:]) for k in range(1, len(other) + 1))
    if not first_a.is_param and not first_b.is_param and first_a.value != first_b.value:
        return False
    return overlaps(a[1:], b[1:])
