# app/newsletter/content.py
"""Stored newsletter content is the editor's CSS and markup joined as
``<style>{css}</style>{html}``. Both halves must survive a round trip so the
editor can be reloaded with the same styles."""
import re
from typing import Optional, Tuple

_LEADING_STYLE = re.compile(r'^\s*<style[^>]*>(.*?)</style>', re.DOTALL | re.IGNORECASE)
_ANY_STYLE = re.compile(r'<style[^>]*>.*?</style>', re.DOTALL | re.IGNORECASE)
_TAG = re.compile(r'<[^>]+>')

def compose_content(css: Optional[str], html: Optional[str]) -> str:
    return f"<style>{css or ''}</style>{html or ''}"

def split_content(content: Optional[str]) -> Tuple[str, str]:
    """Return (css, html); content without a leading style block has no css"""
    if not content:
        return "", ""

    match = _LEADING_STYLE.match(content)
    if not match:
        return "", content
    return match.group(1), content[match.end():]

def content_to_text(content: Optional[str]) -> str:
    """Plain-text rendering for the text/plain mail part"""
    if not content:
        return ""
    text = _ANY_STYLE.sub('', content)
    text = re.sub(r'<br\s*/?>|</p>|</h[1-6]>|</li>|</div>', '\n', text, flags=re.IGNORECASE)
    text = _TAG.sub('', text)
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line)
