"""Transient user-facing notices raised by coordinators."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class BannerKind(Enum):
    NOTIFICATION = "notification"
    ERROR = "error"


class Banner(BaseModel):
    """A short notice shown over the current screen.

    Attributes:
        title: Headline text.
        subtitle: Secondary line, may be empty.
        kind: Styling hint for the presenter.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    subtitle: str = ""
    kind: BannerKind = BannerKind.NOTIFICATION

    @classmethod
    def error(cls, title: str, subtitle: str = "") -> "Banner":
        return cls(title=title, subtitle=subtitle, kind=BannerKind.ERROR)
