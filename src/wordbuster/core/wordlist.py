"""Word list loading."""

from __future__ import annotations

from pathlib import Path

from wordbuster.core.exceptions import WordlistError


def load_wordlist(path: Path) -> list[str]:
    """Read a newline-delimited word list.

    Blank lines and lines starting with ``#`` are skipped; surrounding
    whitespace is stripped.

    Raises:
        WordlistError: If the file does not exist or cannot be read
    """
    if not path.exists():
        raise WordlistError(f"Word list '{path}' does not exist")
    if not path.is_file():
        raise WordlistError(f"Word list '{path}' is not a file")

    try:
        text = path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        raise WordlistError(f"Could not read word list '{path}': {e}") from e

    return [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
