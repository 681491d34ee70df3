"""Classified image references used by the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class LocalReference:
	"""A `file://` reference to an upload on the serving host."""

	raw: str
	path: str


@dataclass(frozen=True)
class RemoteReference:
	"""An externally dereferenceable image URL."""

	url: str


ImageReference = Union[LocalReference, RemoteReference]
