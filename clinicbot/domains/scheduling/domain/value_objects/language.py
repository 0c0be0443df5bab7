"""Language value object."""

from enum import Enum


class Language(str, Enum):
    """Languages templates are written in."""

    PT = "pt"
    EN = "en"

    @classmethod
    def from_preference(cls, preference: str | None, default: "Language | str" = "pt") -> "Language":
        """Map a stored profile preference to a template language.

        Only English is recognised explicitly; anything else falls back to the default.
        """
        if preference == cls.EN.value:
            return cls.EN
        return cls(default)
