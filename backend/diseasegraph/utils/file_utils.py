"""
File handling utilities.
"""

import json
import os
from pathlib import Path
from typing import Any, Union

PathLike = Union[str, Path]


def ensure_parent_dir(file_path: PathLike) -> None:
    """
    Ensure the directory holding a file exists.

    Args:
        file_path: Path of the file about to be written
    """
    parent = Path(file_path).resolve().parent
    os.makedirs(parent, exist_ok=True)


def read_text_file(file_path: PathLike) -> str:
    """
    Read a UTF-8 text file.

    Args:
        file_path: Path to the file

    Returns:
        File content

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file cannot be read
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"File does not exist: {path.resolve()}")
    return path.read_text(encoding="utf-8")


def write_json_file(file_path: PathLike, payload: Any) -> Path:
    """
    Write a payload as pretty-printed UTF-8 JSON, creating parent directories.

    Args:
        file_path: Target path
        payload: JSON-serialisable object

    Returns:
        The resolved target path
    """
    path = Path(file_path).resolve()
    ensure_parent_dir(path)
    path.write_text(
        json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return path
