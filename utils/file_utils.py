"""
File Utilities Module
Reading and writing the text files handled by the command-line tool.
"""

from pathlib import Path


def normalize_path(path: str | Path) -> Path:
    """Convert string path to normalized Path object."""
    return Path(path).expanduser().resolve()


def ensure_directory(directory: Path) -> None:
    """Ensure directory exists, create if necessary."""
    directory.mkdir(parents=True, exist_ok=True)


def read_file_content(file_path: str | Path) -> str:
    """
    Read a UTF-8 text file.

    A leading byte order mark is dropped, since the JSON parser rejects it.

    Args:
        file_path: Path to the file to read

    Returns:
        File contents as string

    Raises:
        FileNotFoundError: If file doesn't exist
        UnicodeDecodeError: If the file is not UTF-8
    """
    with open(normalize_path(file_path), 'r', encoding='utf-8-sig') as f:
        return f.read()
