"""ScriptForge utilities module."""

from scriptforge.utils.screenplay import ScreenplayUtils

__all__ = ["ScreenplayUtils"]
