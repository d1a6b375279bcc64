"""
YDA Portal - Text Processing Utilities
======================================
Sanitising stored rich text before it is written into feeds and calendars.
"""

import html
import re


def sanitize_input(text: str) -> str:
    """Strip markup and script-like patterns, returning plain text."""
    if not text:
        return ""

    text = re.sub(r'<script[^>]*>.*?</script>', '', text, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r'<style[^>]*>.*?</style>', '', text, flags=re.DOTALL | re.IGNORECASE)
    # Block-level tags become spaces so words do not run together
    text = re.sub(r'</?(p|div|br|li|h[1-6])[^>]*>', ' ', text, flags=re.IGNORECASE)
    text = re.sub(r'<[^>]+>', '', text)

    text = html.unescape(text)

    text = re.sub(r'javascript:', '', text, flags=re.IGNORECASE)
    text = re.sub(r'on\w+\s*=', '', text, flags=re.IGNORECASE)

    text = text.replace('\x00', '')
    text = re.sub(r'\s+', ' ', text).strip()

    return text


def truncate_text(text: str, max_length: int = 500) -> str:
    """Truncate text to max_length, ending at a word boundary."""
    if not text or len(text) <= max_length:
        return text or ""
    truncated = text[:max_length]
    last_space = truncated.rfind(' ')
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated + "..."


def xml_escape(text: str) -> str:
    return (
        (text or "")
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )
