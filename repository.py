#!/usr/bin/env python3
"""Normalized repository record shared by sources and the destination."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class RepositoryDescriptor:
    """One repository to mirror, independent of the platform it came from."""
    name: str
    clone_url: str
    clone_username: str
    clone_password: str = field(repr=False)
    destination_owner: str
    destination_name: str

    def __post_init__(self) -> None:
        for attr in ("name", "clone_url", "destination_owner", "destination_name"):
            if not getattr(self, attr):
                raise ValueError(f"repository descriptor field '{attr}' is empty")

    @property
    def key(self) -> Tuple[str, str]:
        """(owner, name) pair identifying the mirror on the destination."""
        return (self.destination_owner, self.destination_name)

    @property
    def full_name(self) -> str:
        return f"{self.destination_owner}/{self.destination_name}"
