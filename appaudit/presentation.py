"""Localized display labels for enum values."""

from .models import AuditMode, InstallSource, Risk

DEFAULT_LOCALE = "en"

LABELS = {
    "en": {
        Risk.CRITICAL: "CRITICAL",
        Risk.HIGH: "HIGH",
        Risk.MEDIUM: "MEDIUM",
        Risk.LOW: "LOW",
        InstallSource.PLAY_STORE: "Google Play",
        InstallSource.AMAZON: "Amazon Appstore",
        InstallSource.SAMSUNG: "Galaxy Store",
        InstallSource.ADB: "ADB / Developer",
        InstallSource.SYSTEM: "System",
        InstallSource.UNKNOWN: "Unknown",
        InstallSource.SIDELOAD: "Manual install",
        AuditMode.QUICK: "Quick",
        AuditMode.FULL: "Full (with APK)",
    },
    "es": {
        Risk.CRITICAL: "CRÍTICO",
        Risk.HIGH: "ALTO",
        Risk.MEDIUM: "MEDIO",
        Risk.LOW: "BAJO",
        InstallSource.PLAY_STORE: "Google Play",
        InstallSource.AMAZON: "Amazon Appstore",
        InstallSource.SAMSUNG: "Galaxy Store",
        InstallSource.ADB: "ADB / Desarrollador",
        InstallSource.SYSTEM: "Sistema",
        InstallSource.UNKNOWN: "Desconocido",
        InstallSource.SIDELOAD: "Instalación manual",
        AuditMode.QUICK: "Rápida",
        AuditMode.FULL: "Completa (con APK)",
    },
}


def label(value, locale: str = DEFAULT_LOCALE) -> str:
    """Display label for a Risk, InstallSource or AuditMode; unknown locales fall back to English."""
    table = LABELS.get(locale.lower(), LABELS[DEFAULT_LOCALE])
    return table[value]
