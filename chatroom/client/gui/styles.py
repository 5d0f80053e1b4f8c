"""Shared style constants for the GUI client."""

SIDEBAR_BG = "#1f2933"
PRIMARY_BG = "#f5f7fa"
ACCENT = "#3b82f6"
OWN_BUBBLE = "#dbeafe"
OTHER_BUBBLE = "#e5e7eb"
ONLINE = "#16a34a"
TEXT_PRIMARY = "#1f2933"
TEXT_MUTED = "#6b7280"
ERROR = "#dc2626"
PADDING = 8
BORDER_RADIUS = 6
SMOOTH_SCROLL_MS = 250
