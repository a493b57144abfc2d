"""
Tests for context wiring and the command line interface.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from storyblok.adapters.memory_cache import MemoryStoryCache, NullStoryCache
from storyblok.app_shell import cli
from storyblok.context import StoryblokContext
from storyblok.settings.loader import TOKEN_ENV_VAR
from storyblok.settings.models import CacheSettings, ClientSettings, Settings

RICH_TEXT = {
    "type": "doc",
    "content": [
        {
            "type": "paragraph",
            "content": [{"type": "text", "text": "Hello", "marks": [{"type": "bold"}]}],
        }
    ],
}


def story_api(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/cdn/stories/home"):
        story = {"id": 1, "slug": "home", "content": {"body": RICH_TEXT, "title": "Home"}}
        return httpx.Response(200, json={"story": story, "cv": 1})
    return httpx.Response(404, text="missing")


@pytest.fixture
def settings() -> Settings:
    return Settings(client=ClientSettings(access_token="t"))


@pytest.fixture(autouse=True)
def no_token_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)


# --- Context ---


class TestContext:
    """Service wiring."""

    def test_create_wires_memory_cache(self, settings: Settings) -> None:
        ctx = StoryblokContext.create(settings, transport=httpx.MockTransport(story_api))
        assert isinstance(ctx.cache, MemoryStoryCache)
        ctx.close()

    def test_create_without_cache(self) -> None:
        settings = Settings(cache=CacheSettings(type="none"))
        ctx = StoryblokContext.create(settings, transport=httpx.MockTransport(story_api))
        assert isinstance(ctx.cache, NullStoryCache)
        ctx.close()

    def test_fetch_and_render_field(self, settings: Settings) -> None:
        ctx = StoryblokContext.create(settings, transport=httpx.MockTransport(story_api))
        response = ctx.stories.get_story("home")
        assert ctx.render_rich_text_field(response.story.content, "body") == (
            "<p><strong>Hello</strong></p>"
        )
        ctx.close()

    def test_render_field_errors(self, settings: Settings) -> None:
        ctx = StoryblokContext.create(settings, transport=httpx.MockTransport(story_api))
        with pytest.raises(KeyError):
            ctx.render_rich_text_field({}, "body")
        with pytest.raises(ValueError):
            ctx.render_rich_text_field({"body": "plain"}, "body")
        assert ctx.render_rich_text_field({"body": None}, "body") == ""
        ctx.close()


# --- CLI ---


class TestCli:
    """render and story subcommands."""

    @pytest.fixture
    def settings_file(self, tmp_path: Path) -> Path:
        path = tmp_path / "storyblok.yaml"
        path.write_text("client:\n  access_token: t\nrichtext:\n  keyed_resolvers: false\n")
        return path

    def test_render(
        self, tmp_path: Path, settings_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = tmp_path / "doc.json"
        source.write_text(json.dumps(RICH_TEXT))
        assert cli.main(["--settings", str(settings_file), "render", str(source)]) == 0
        assert capsys.readouterr().out.strip() == "<p><strong>Hello</strong></p>"

    def test_render_missing_file(self, tmp_path: Path, settings_file: Path) -> None:
        missing = str(tmp_path / "none.json")
        assert cli.main(["--settings", str(settings_file), "render", missing]) == 1

    def test_render_invalid_json(self, tmp_path: Path, settings_file: Path) -> None:
        source = tmp_path / "doc.json"
        source.write_text("{not json")
        assert cli.main(["--settings", str(settings_file), "render", str(source)]) == 1

    def test_missing_settings_uses_defaults(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        source = tmp_path / "doc.json"
        source.write_text(json.dumps(RICH_TEXT))
        args = ["--settings", str(tmp_path / "absent.yaml"), "render", str(source)]
        assert cli.main(args) == 0
        assert "<strong>Hello</strong>" in capsys.readouterr().out

    def test_story_field(
        self,
        settings_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        self._patch_transport(monkeypatch)
        args = ["--settings", str(settings_file), "story", "home", "--field", "body"]
        assert cli.main(args) == 0
        assert capsys.readouterr().out.strip() == "<p><strong>Hello</strong></p>"

    def test_story_json(
        self,
        settings_file: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        self._patch_transport(monkeypatch)
        assert cli.main(["--settings", str(settings_file), "story", "home"]) == 0
        assert json.loads(capsys.readouterr().out)["slug"] == "home"

    def test_story_missing_field(
        self, settings_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        self._patch_transport(monkeypatch)
        args = ["--settings", str(settings_file), "story", "home", "--field", "nope"]
        assert cli.main(args) == 1

    def test_story_api_error(self, settings_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self._patch_transport(monkeypatch)
        assert cli.main(["--settings", str(settings_file), "story", "missing"]) == 1

    @staticmethod
    def _patch_transport(monkeypatch: pytest.MonkeyPatch) -> None:
        original = StoryblokContext.create.__func__  # type: ignore[attr-defined]

        def create(cls: type[StoryblokContext], settings: Settings, **_: Any) -> StoryblokContext:
            return original(cls, settings, transport=httpx.MockTransport(story_api))

        monkeypatch.setattr(StoryblokContext, "create", classmethod(create))
