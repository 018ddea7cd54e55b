"""Constants used across the StarBuster package."""

# Service endpoints and defaults
DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_FRONTEND_URL = "http://localhost:3000"
DEFAULT_RESULTS_DIR = "results"
ANALYZE_ENDPOINT = "/api/analyze"
DEFAULT_MAX_STARS = 500
DEFAULT_MAX_USERS = 1000
REQUEST_TIMEOUT = 120  # Analysis runs server-side and can take a while
MAX_RETRIES = 3
RESULT_TTL_DAYS = 30

GITHUB_URL_PATTERN = r"^https://github\.com/[a-zA-Z0-9_.-]+/[a-zA-Z0-9_.-]+/?$"

# Creation-date clustering thresholds
SUSPICIOUS_DAY_THRESHOLD = 3  # count > 3 -> listed as a suspicious day
MEDIUM_SEVERITY_THRESHOLD = 5  # count > 5 -> Medium, also the warning threshold
HIGH_SEVERITY_THRESHOLD = 10  # count > 10 -> High, also the critical threshold

CLUSTERING_FALLBACK_SUMMARY = (
    "No significant clustering of account creation dates was detected "
    "among the analyzed stargazers."
)

# Three-band suspicion policy (results page)
THREE_BAND_MEDIUM_MIN = 30
THREE_BAND_HIGH_MIN = 60

# Two-threshold policy (share cards and page metadata)
SHARE_CARD_MEDIUM_MIN = 40
SHARE_CARD_HIGH_MIN = 70

BAND_STYLES = {
    "LOW": {
        "label": "LOW",
        "color": "text-green-700",
        "background": "bg-green-50",
        "icon": "check-circle",
        "emoji": "✅",
    },
    "MEDIUM": {
        "label": "MEDIUM",
        "color": "text-orange-700",
        "background": "bg-orange-50",
        "icon": "alert-triangle",
        "emoji": "⚠️",
    },
    "HIGH": {
        "label": "HIGH",
        "color": "text-red-700",
        "background": "bg-red-50",
        "icon": "alert-circle",
        "emoji": "🚨",
    },
}

SHARE_CARD_COLORS = {
    "High Risk": "#dc2626",
    "Medium Risk": "#d97706",
    "Low Risk": "#059669",
}

# shields.io colors for the share badge
BADGE_COLORS = {
    "High Risk": "red",
    "Medium Risk": "yellow",
    "Low Risk": "success",
}

# User-facing messages per error category
ERROR_MESSAGES = {
    "invalid-input": "Invalid GitHub repository URL. Please check the URL and try again.",
    "not-found": "Repository not found. Please verify the repository exists and is public.",
    "server-error": "Server error occurred. Please try again in a few moments.",
    "network-error": "Network connection error. Please check your internet connection and try again.",
}

# Bar colors for the creation-date plot, keyed by severity label
SEVERITY_PLOT_COLORS = {
    "High": "red",
    "Medium": "orange",
    "Low": "gold",
}
