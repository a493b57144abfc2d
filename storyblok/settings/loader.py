import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from storyblok.settings.models import Settings

TOKEN_ENV_VAR = "STORYBLOK_TOKEN"


def _strip_fence(content: str) -> str:
    """Return the first ```yaml block if present, else the whole text."""
    yaml_lines = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def parse_settings(content: str) -> Settings:
    """
    Parse settings from YAML text.
    Raises ValueError for invalid YAML or schema violations.
    """
    try:
        data = yaml.safe_load(_strip_fence(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in settings file: {e}") from e

    try:
        settings = Settings.model_validate(data or {})
    except ValidationError as e:
        raise ValueError(f"Settings validation failed:\n{e}") from e

    token = os.environ.get(TOKEN_ENV_VAR)
    if token:
        settings = settings.model_copy(
            update={"client": settings.client.model_copy(update={"access_token": token})}
        )
    return settings


def load_settings(path: Path) -> Settings:
    """
    Load and validate the settings file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at: {path}")

    with open(path) as f:
        content = f.read()

    return parse_settings(content)
