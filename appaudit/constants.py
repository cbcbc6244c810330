"""
Shared Constants and Regex Patterns
"""

import re

# Sensitive capability keywords; a permission containing any of them is dangerous
DANGEROUS_PERMISSION_KEYWORDS = [
    "CAMERA", "LOCATION", "FINE_LOCATION", "COARSE_LOCATION",
    "RECORD_AUDIO", "READ_CONTACTS", "WRITE_CONTACTS",
    "READ_SMS", "SEND_SMS", "RECEIVE_SMS", "READ_PHONE_STATE",
    "CALL_PHONE", "READ_CALL_LOG", "WRITE_CALL_LOG",
    "READ_CALENDAR", "WRITE_CALENDAR", "BODY_SENSORS",
    "READ_EXTERNAL_STORAGE", "WRITE_EXTERNAL_STORAGE",
    "ACCESS_MEDIA_LOCATION", "BLUETOOTH", "NEARBY_WIFI",
    "POST_NOTIFICATIONS", "REQUEST_INSTALL_PACKAGES",
    "SYSTEM_ALERT_WINDOW", "WRITE_SETTINGS",
]

# Overlay / framework resource packages are never scored
SYSTEM_PACKAGE_PREFIXES = (
    "android.",
    "com.android.",
    "com.google.android.overlay",
)

SYSTEM_PACKAGE_MARKERS = [
    ".overlay",
    "frameworkres",
    "resources",
    "permissioncontroller",
    "connectivity",
    "media.module",
    "wifiresources",
    "cellbroadcast",
    "healthfitness",
    "documentsui",
    "ext.services",
]

SYSTEM_PATH_PREFIXES = (
    "/system/",
    "/product/",
    "/apex/",
    "/vendor/",
)

# Debug keystore fingerprint prefix and subject marker
DEBUG_CERT_HASH_PREFIX = "a40da80a"
DEBUG_CERT_SUBJECT_MARKER = "android debug"

SUSPICIOUS_NAME_PATTERNS = [
    "com.app.test", "com.example", "com.android.test",
    "free.vpn", "free.antivirus", "hack", "crack", "mod",
    "pro.unlock", "premium.free", "cheat",
]

# Popular app keyword -> legitimate package id
IMPERSONATION_TARGETS = {
    "whatsapp": "com.whatsapp",
    "instagram": "com.instagram.android",
    "facebook": "com.facebook.katana",
    "twitter": "com.twitter.android",
    "telegram": "org.telegram.messenger",
    "tiktok": "com.zhiliaoapp.musically",
    "youtube": "com.google.android.youtube",
    "netflix": "com.netflix.mediaclient",
    "spotify": "com.spotify.music",
}

TRACKING_KEYWORDS = ["tracker", "analytics", "adservice", "stat", "click", "log"]

DEVICE_ADMIN_PERMISSION = "android.permission.BIND_DEVICE_ADMIN"
INTERNET_PERMISSION = "android.permission.INTERNET"

EXCESSIVE_PERMISSION_COUNT = 25

# Archive integrity thresholds
MIN_ARCHIVE_SIZE_BYTES = 150_000
MAX_MODIFIED_AFTER_INSTALL_SECONDS = 2 * 3600
MANIFEST_ENTRY = "AndroidManifest.xml"

# Regex objects for efficiency
DEX_ENTRY_REGEX = re.compile(r"^classes\d*\.dex$")
OBFUSCATION_REGEX = re.compile(r"[Il1oO0]{3,}")
LONG_DIGIT_RUN_REGEX = re.compile(r"\d{4,}")

# Installer package -> install source (checked in order, substring match)
INSTALLER_PATTERNS = [
    ("com.android.vending", "play_store"),
    ("com.amazon.venezia", "amazon"),
    ("com.sec.android.app.samsungapps", "samsung"),
    ("adb", "adb"),
    ("packageinstaller", "adb"),
]

# Root indicators
SU_BINARY_PATHS = ["/system/bin/su", "/system/xbin/su"]
TEST_KEYS_TAG = "test-keys"

# Unknown sources is a global toggle only before Android 8.0
LEGACY_UNKNOWN_SOURCES_MAX_SDK = 26

# Finding titles that mark a reference database malware hit
MALWARE_SIGNATURE_TITLE = "Malware signature detected"
MALICIOUS_PACKAGE_TITLE = "Known malicious package"
MALWARE_FINDING_TITLES = (MALWARE_SIGNATURE_TITLE, MALICIOUS_PACKAGE_TITLE)
