# fitstore/utils/formatters.py
from pathlib import PurePath
from typing import Optional

def _clean_file_name(name: str) -> str:
    # Drop any client-side directories (both separators)
    name = PurePath(name.replace('\\', '/')).name
    return ''.join(
        ch for ch in name
        if ch.isprintable() and ch not in '"\\'
    ).strip()

def safe_file_name(name: Optional[str], default: str = "download.pdf") -> str:
    """Display name usable inside a quoted header parameter"""
    cleaned = _clean_file_name(name) if name else ''
    return cleaned or _clean_file_name(default) or "download"

def attachment_header(file_name: str) -> str:
    """Content-Disposition value for a file download"""
    return f'attachment; filename="{safe_file_name(file_name)}"'
