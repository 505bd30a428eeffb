"""Tests for the public page view model."""

import pytest

from stoop.core.models import TranscriptionSegment
from stoop.services.public import DEFAULT_LINK_TITLE, build_public_page, safe_link


async def _published(repository, title: str):
    episode = await repository.create_episode(title=title, audio_url=f"http://test/{title}.wav")
    await repository.publish_episode(episode.id)
    return episode


class TestSafeLink:
    @pytest.mark.parametrize(
        "url",
        ["https://nyc.gov/zoning", "http://example.org/a?b=c"],
    )
    def test_http_links_kept(self, url):
        assert safe_link(url) == url

    @pytest.mark.parametrize(
        "url",
        [None, "", "   ", "javascript:alert(1)", "example.org", "ftp://example.org/file"],
    )
    def test_other_values_dropped(self, url):
        assert safe_link(url) is None


class TestBuildPublicPage:
    async def test_coming_soon_without_published_episodes(self, repository):
        await repository.create_episode(title="Draft", audio_url="http://test/d.wav")
        page = await build_public_page(repository)
        assert page.coming_soon
        assert page.nodes == []
        assert page.archive == []

    async def test_latest_published_is_primary(self, repository):
        older = await _published(repository, "Older")
        newer = await _published(repository, "Newer")
        await repository.create_episode(title="Draft", audio_url="http://test/d.wav")

        page = await build_public_page(repository)

        assert page.episode.id == newer.id
        assert [ep.id for ep in page.archive] == [older.id]

    async def test_episode_query_selects_archive_entry(self, repository):
        older = await _published(repository, "Older")
        newer = await _published(repository, "Newer")

        page = await build_public_page(repository, episode_id=older.id)

        assert page.episode.id == older.id
        assert [ep.id for ep in page.archive] == [newer.id]

    async def test_unpublished_episode_query_falls_back(self, repository):
        newer = await _published(repository, "Live")
        draft = await repository.create_episode(title="Draft", audio_url="http://test/d.wav")

        page = await build_public_page(repository, episode_id=draft.id)

        assert page.episode.id == newer.id

    async def test_nodes_in_order_with_links(self, repository):
        episode = await _published(repository, "Linked")
        nodes = await repository.replace_nodes(
            episode.id,
            [
                TranscriptionSegment(text="Intro", start=0.0, end=2.0),
                TranscriptionSegment(text="Cited", start=2.0, end=5.0),
                TranscriptionSegment(text="Titled", start=5.0, end=7.0),
            ],
        )
        await repository.update_node(nodes[1].id, reference_link="https://nyc.gov/zoning")
        await repository.update_node(
            nodes[2].id, reference_link="https://example.org", reference_title="Budget PDF"
        )

        page = await build_public_page(repository)

        assert [n.content for n in page.nodes] == ["Intro", "Cited", "Titled"]
        assert not page.nodes[0].is_linked
        assert page.nodes[1].link == "https://nyc.gov/zoning"
        assert page.nodes[1].link_title == DEFAULT_LINK_TITLE
        assert page.nodes[2].link_title == "Budget PDF"
