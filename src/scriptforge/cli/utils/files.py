"""Reading and writing screenplay files at the CLI edge."""

from __future__ import annotations

from pathlib import Path

from scriptforge.config import get_logger
from scriptforge.exceptions import ScriptForgeError, ScriptForgeFileNotFoundError

logger = get_logger(__name__)


def read_fountain(path: Path) -> str:
    """Read a Fountain file as UTF-8 text.

    Raises:
        ScriptForgeFileNotFoundError: If the path is not an existing file
        ScriptForgeError: If the file is not valid UTF-8
    """
    if not path.is_file():
        raise ScriptForgeFileNotFoundError(
            message=f"Fountain file not found: {path}",
            hint="Check the path, or create the file first",
            details={"path": str(path)},
        )
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ScriptForgeError(
            message=f"Fountain file is not valid UTF-8: {path}",
            hint="Re-save the screenplay with UTF-8 encoding",
            details={"path": str(path), "error": str(e)},
        ) from e
    logger.debug("Read screenplay", path=str(path), chars=len(text))
    return text


def write_fountain(path: Path, text: str) -> None:
    """Write screenplay text back to disk as UTF-8."""
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote screenplay", path=str(path), chars=len(text))
