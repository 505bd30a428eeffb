"""View model for the public listener page.

The most recently published episode is the primary one; the remaining
published episodes form the archive. ``?episode=<id>`` promotes another
published episode to primary.
"""

from dataclasses import dataclass, field
from urllib.parse import urlparse

from stoop.services.storage.models_db import Episode
from stoop.services.storage.repository import EpisodeRepository

DEFAULT_LINK_TITLE = "View Source"


@dataclass(frozen=True)
class PublicNode:
    """One transcript segment as shown to listeners."""

    content: str
    start_time: float | None = None
    link: str | None = None
    link_title: str = DEFAULT_LINK_TITLE

    @property
    def is_linked(self) -> bool:
        return self.link is not None


@dataclass
class PublicPage:
    episode: Episode | None = None
    nodes: list[PublicNode] = field(default_factory=list)
    archive: list[Episode] = field(default_factory=list)

    @property
    def coming_soon(self) -> bool:
        return self.episode is None


def safe_link(url: str | None) -> str | None:
    """Return *url* if it is an absolute http(s) link, else None."""
    if not url:
        return None
    parsed = urlparse(url.strip())
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return url.strip()
    return None


async def build_public_page(repo: EpisodeRepository, episode_id: int | None = None) -> PublicPage:
    """Assemble the public page from published episodes.

    With no published episode the page is empty ("coming soon") and the
    transcript table is not queried. An unknown or unpublished
    ``episode_id`` falls back to the most recent episode.
    """
    published = await repo.list_published()
    if not published:
        return PublicPage()

    primary = published[0]
    if episode_id is not None:
        primary = next((ep for ep in published if ep.id == episode_id), primary)

    nodes = [
        PublicNode(
            content=node.content,
            start_time=node.start_time,
            link=safe_link(node.reference_link),
            link_title=node.reference_title or DEFAULT_LINK_TITLE,
        )
        for node in await repo.list_nodes(primary.id)
    ]
    archive = [ep for ep in published if ep.id != primary.id]
    return PublicPage(episode=primary, nodes=nodes, archive=archive)
