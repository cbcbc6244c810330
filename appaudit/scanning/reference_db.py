"""
Reference Database

Read-only lookups of known malware certificates, malicious package names
and tracker libraries. Loaded once per process from a local YAML or JSON
file; never mutated afterwards.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

import yaml

from ..exceptions import ReferenceDatabaseError
from ..models import MalwareMatch, TrackerMatch

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_FILE = Path(__file__).parent.parent / "data" / "reference_db.yaml"


class ReferenceDatabase(ABC):
    """Lookup contract consumed by the App Auditor."""

    @abstractmethod
    def lookup_by_certificate_hash(self, cert_hash: str) -> Optional[MalwareMatch]:
        ...

    @abstractmethod
    def lookup_by_package_name(self, package_name: str) -> Optional[MalwareMatch]:
        ...

    @abstractmethod
    def lookup_tracker(self, package_name: str) -> Optional[TrackerMatch]:
        ...


class LocalReferenceDatabase(ReferenceDatabase):
    """
    In-memory reference database.

    Usage:
        db = LocalReferenceDatabase.from_file("reference_db.yaml")
        match = db.lookup_by_package_name("com.evil.sms")
    """

    def __init__(
        self,
        certificates: Optional[Mapping[str, str]] = None,
        packages: Optional[Mapping[str, str]] = None,
        trackers: Optional[Mapping[str, TrackerMatch]] = None,
    ):
        self._certificates = MappingProxyType(
            {h.lower(): MalwareMatch(name) for h, name in (certificates or {}).items()}
        )
        self._packages = MappingProxyType(
            {pkg: MalwareMatch(name) for pkg, name in (packages or {}).items()}
        )
        self._trackers = MappingProxyType(dict(trackers or {}))

    def __len__(self) -> int:
        return len(self._certificates) + len(self._packages) + len(self._trackers)

    def lookup_by_certificate_hash(self, cert_hash: str) -> Optional[MalwareMatch]:
        return self._certificates.get(cert_hash.lower())

    def lookup_by_package_name(self, package_name: str) -> Optional[MalwareMatch]:
        return self._packages.get(package_name)

    def lookup_tracker(self, package_name: str) -> Optional[TrackerMatch]:
        """Match the exact package name, else its longest dotted prefix."""
        parts = package_name.split(".")
        for end in range(len(parts), 0, -1):
            match = self._trackers.get(".".join(parts[:end]))
            if match is not None:
                return match
        return None

    @classmethod
    def from_dict(cls, data: dict, source: Optional[str] = None) -> "LocalReferenceDatabase":
        """Build from the parsed file layout (certificates / packages / trackers)."""
        if not isinstance(data, dict):
            raise ReferenceDatabaseError("Reference database must be a mapping", source)

        try:
            trackers = {
                name: TrackerMatch(name=entry["name"], risk_score=int(entry["risk_score"]))
                for name, entry in (data.get("trackers") or {}).items()
            }
            return cls(
                certificates={str(k): str(v) for k, v in (data.get("certificates") or {}).items()},
                packages={str(k): str(v) for k, v in (data.get("packages") or {}).items()},
                trackers=trackers,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ReferenceDatabaseError("Malformed reference database", source, e)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "LocalReferenceDatabase":
        """Load a YAML (.yaml/.yml) or JSON reference database."""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ReferenceDatabaseError(f"Cannot load reference database: {path}", str(path), e)

        db = cls.from_dict(data or {}, str(path))
        logger.info(f"Loaded reference database from {path} ({len(db)} entries)")
        return db


def load_default() -> LocalReferenceDatabase:
    """Load the bundled sample reference database."""
    return LocalReferenceDatabase.from_file(DEFAULT_DATABASE_FILE)
