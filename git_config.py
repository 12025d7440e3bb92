#!/usr/bin/env python3
"""Minimal Git config scanning for a mirror's origin URL.

Only the ``url`` key of the ``[remote "origin"]`` section is interpreted.
Edits are made by offset on the matched line so every other byte of the file
(comments, other remotes, whitespace, line endings) is left untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import quote, urlsplit

from exceptions import ParseError

# [section] or [section "subsection"], optionally followed by a comment
_SECTION_RE = re.compile(
    r'^\s*\[\s*([A-Za-z0-9.-]+)(?:\s+"((?:[^"\\]|\\.)*)")?\s*\]\s*(?:[#;].*)?$'
)
_URL_KEY_RE = re.compile(r"^\s*url\s*=", re.IGNORECASE)
_INLINE_COMMENT_RE = re.compile(r"\s[#;]")

# Characters left unescaped in userinfo, matching what Gitea itself writes
_USERINFO_SAFE = "$&+,;="


@dataclass(frozen=True)
class OriginEntry:
    """Location of the origin URL value inside a config file's text."""
    url: str
    start: int
    end: int
    line_number: int


def _is_origin_section(line: str) -> Optional[bool]:
    """Return None for non-header lines, else whether it opens remote.origin."""
    match = _SECTION_RE.match(line)
    if match is None:
        return None
    section, subsection = match.group(1), match.group(2)
    if subsection is None:
        # Deprecated [remote.origin] spelling
        return section.lower() == "remote.origin"
    return section.lower() == "remote" and subsection == "origin"


def _value_span(line: str, value_offset: int) -> Optional[Tuple[int, int]]:
    """Return the (start, end) of the value within ``line`` or None if empty."""
    raw = line[value_offset:]
    lead = len(raw) - len(raw.lstrip())
    body = raw[lead:]

    if body.startswith('"'):
        close = body.find('"', 1)
        if close <= 1:
            return None
        return value_offset + lead + 1, value_offset + lead + close

    comment = _INLINE_COMMENT_RE.search(body)
    if comment is not None:
        body = body[: comment.start()]
    body = body.rstrip()
    if not body:
        return None
    return value_offset + lead, value_offset + lead + len(body)


def find_origin_url(text: str) -> Optional[OriginEntry]:
    """Locate the first ``url`` of the ``[remote "origin"]`` section."""
    offset = 0
    in_origin = False

    for line_number, raw_line in enumerate(text.splitlines(keepends=True), start=1):
        line = raw_line.rstrip("\r\n")
        stripped = line.lstrip()

        if stripped.startswith(("#", ";")) or not stripped:
            offset += len(raw_line)
            continue

        header = _is_origin_section(line)
        if header is not None:
            in_origin = header
        elif in_origin:
            key = _URL_KEY_RE.match(line)
            if key is not None:
                span = _value_span(line, key.end())
                if span is not None:
                    start, end = span
                    return OriginEntry(
                        url=line[start:end],
                        start=offset + start,
                        end=offset + end,
                        line_number=line_number,
                    )

        offset += len(raw_line)

    return None


def replace_origin_url(text: str, entry: OriginEntry, new_url: str) -> str:
    """Replace the value located by ``entry`` and nothing else."""
    if text[entry.start:entry.end] != entry.url:
        raise ParseError("config text changed since the origin url was located")
    return text[: entry.start] + new_url + text[entry.end:]


def with_credentials(url: str, username: str, password: str) -> str:
    """Return ``url`` with its user-info replaced by username/password.

    Scheme, host, port, path, query and fragment are copied byte for byte.
    Empty username and password remove the user-info altogether.
    """
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise ParseError(f"unable to parse origin url: {e}") from e

    prefix_len = len(parts.scheme) + 3
    if not parts.scheme or not parts.netloc or url[len(parts.scheme):prefix_len] != "://":
        raise ParseError("origin url has no scheme or host")

    authority_end = len(url)
    for delimiter in "/?#":
        position = url.find(delimiter, prefix_len)
        if position != -1:
            authority_end = min(authority_end, position)

    host = url[prefix_len:authority_end].rpartition("@")[2]
    if not host:
        raise ParseError("origin url has no host")

    if username or password:
        userinfo = (
            quote(username, safe=_USERINFO_SAFE)
            + ":"
            + quote(password, safe=_USERINFO_SAFE)
            + "@"
        )
    else:
        userinfo = ""

    return url[:prefix_len] + userinfo + host + url[authority_end:]
