"""Small helpers for turning user input into video ids and times into labels."""

import math
import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

_VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")
_YOUTUBE_HOSTS = {"youtube.com", "m.youtube.com", "music.youtube.com", "youtube-nocookie.com"}
_PATH_PREFIXES = ("embed", "shorts", "v", "live")


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract a YouTube video id from a URL or a bare id.

    Example:
        >>> extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
        'dQw4w9WgXcQ'
        >>> extract_video_id("https://youtu.be/dQw4w9WgXcQ?t=42")
        'dQw4w9WgXcQ'
        >>> extract_video_id("https://example.com/video") is None
        True
    """
    text = (url or "").strip()
    if not text:
        return None
    if _VIDEO_ID_PATTERN.match(text):
        return text
    if "://" not in text:
        text = "https://" + text
    parsed = urlparse(text)
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    parts = [part for part in parsed.path.split("/") if part]

    candidate: Optional[str] = None
    if host == "youtu.be":
        candidate = parts[0] if parts else None
    elif host in _YOUTUBE_HOSTS:
        if parts and parts[0] == "watch":
            candidate = (parse_qs(parsed.query).get("v") or [None])[0]
        elif len(parts) >= 2 and parts[0] in _PATH_PREFIXES:
            candidate = parts[1]
    if candidate and _VIDEO_ID_PATTERN.match(candidate):
        return candidate
    return None


def format_time(seconds: float) -> str:
    """Format seconds as ``M:SS`` or ``H:MM:SS``."""
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
