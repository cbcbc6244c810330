"""Custom exceptions for the audit engine."""

from __future__ import annotations

from typing import Optional


class AuditError(Exception):
    """Base exception for all audit errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PackageMetadataError(AuditError):
    """Raised when a package's metadata cannot be read (or the package vanished)."""

    def __init__(self, package_name: str, cause: Optional[Exception] = None):
        self.package_name = package_name
        self.cause = cause
        message = f"Cannot read metadata for package: {package_name}"
        details = {"package_name": package_name}
        if cause:
            message += f" ({cause})"
            details["cause"] = str(cause)
        super().__init__(message, details)


class PackageAuditError(AuditError):
    """Raised when auditing a single package fails."""

    def __init__(self, package_name: str, cause: Optional[Exception] = None):
        self.package_name = package_name
        self.cause = cause
        message = f"Audit failed for package: {package_name}"
        details = {"package_name": package_name}
        if cause:
            message += f" ({cause})"
            details["cause"] = str(cause)
        super().__init__(message, details)


class SettingsReadError(AuditError):
    """Raised when a device security setting cannot be read."""

    def __init__(self, setting: str, cause: Optional[Exception] = None):
        self.setting = setting
        self.cause = cause
        details = {"setting": setting}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Cannot read device setting: {setting}", details)


class ReferenceDatabaseError(AuditError):
    """Raised when the reference database cannot be loaded."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        details = {"path": path}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)


class SnapshotError(AuditError):
    """Raised when a device snapshot file is missing or malformed."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        details = {"path": path}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)


class ConfigurationError(AuditError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        super().__init__(message, {"config_key": config_key})
