from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ChangeFreq = Literal["daily", "weekly", "monthly"]


class StaticPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    changefreq: ChangeFreq
    priority: float = Field(ge=0.0, le=1.0)


DEFAULT_STATIC_PAGES = (
    StaticPage(path="/", changefreq="daily", priority=1.0),
    StaticPage(path="/about", changefreq="monthly", priority=0.7),
    StaticPage(path="/contact", changefreq="monthly", priority=0.7),
    StaticPage(path="/subscription", changefreq="weekly", priority=0.7),
    StaticPage(path="/privacy", changefreq="monthly", priority=0.7),
    StaticPage(path="/terms", changefreq="monthly", priority=0.7),
    StaticPage(path="/cookies", changefreq="monthly", priority=0.7),
    StaticPage(path="/disclaimer", changefreq="monthly", priority=0.7),
    StaticPage(path="/editorial-guidelines", changefreq="monthly", priority=0.7),
    StaticPage(path="/rss", changefreq="daily", priority=0.5),
)
