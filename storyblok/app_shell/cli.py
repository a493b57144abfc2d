import argparse
import json
import logging
import sys
from pathlib import Path

from storyblok.components.richtext import RichTextRenderer
from storyblok.components.stories import StoryQueryParameters
from storyblok.context import StoryblokContext
from storyblok.core.ports.http import StoryblokApiError
from storyblok.settings.loader import load_settings
from storyblok.settings.models import Settings

logger = logging.getLogger("cli")

SETTINGS_PATH = "storyblok.yaml"


def get_settings(path: str) -> Settings:
    settings_path = Path(path)
    if not settings_path.exists():
        logger.info(f"Settings file {path} not found, using defaults.")
        return Settings()
    return load_settings(settings_path)


def handle_render(settings: Settings, args: argparse.Namespace) -> int:
    source = Path(args.file)
    if not source.exists():
        logger.error(f"File {source} not found.")
        return 1

    try:
        content = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error(f"File {source} is not valid JSON: {e}")
        return 1

    renderer = RichTextRenderer(settings.to_richtext_options())
    print(renderer.render(content))
    return 0


def handle_story(settings: Settings, args: argparse.Namespace) -> int:
    ctx = StoryblokContext.create(settings)
    try:
        params = StoryQueryParameters(version=args.version) if args.version else None
        response = ctx.stories.get_story(args.slug, params)
        if args.field:
            print(ctx.render_rich_text_field(response.story.content, args.field))
        else:
            print(json.dumps(response.story.model_dump(mode="json"), indent=2))
        return 0
    except StoryblokApiError as e:
        logger.error(f"API request failed: {e}")
        return 1
    except KeyError:
        logger.error(f"Field '{args.field}' not found in story '{args.slug}'.")
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1
    finally:
        ctx.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Storyblok rich text CLI")
    parser.add_argument("--settings", default=SETTINGS_PATH, help="Path to settings YAML")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # render
    render_parser = subparsers.add_parser("render", help="Render a rich text JSON file")
    render_parser.add_argument("file", help="Path to rich text JSON")

    # story
    story_parser = subparsers.add_parser("story", help="Fetch a story")
    story_parser.add_argument("slug", help="Story slug")
    story_parser.add_argument("--field", help="Rich text field to render")
    story_parser.add_argument(
        "--version", choices=["draft", "published"], help="Content version"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.settings)
    except ValueError as e:
        logger.error(str(e))
        return 1

    if args.command == "render":
        return handle_render(settings, args)
    elif args.command == "story":
        return handle_story(settings, args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
