"""Loading repository lists from files."""

from pathlib import Path

import yaml

from .models import Repository


def parse_repository_entry(entry: object) -> Repository:
    """Parse "owner/repo" or {"owner": ..., "repo": ...}.

    Raises:
        ValueError: If the entry has neither form
    """
    if isinstance(entry, str):
        return Repository.parse(entry)
    if isinstance(entry, dict) and entry.get("owner") and (entry.get("repo") or entry.get("name")):
        return Repository(owner=str(entry["owner"]), repo=str(entry.get("repo") or entry["name"]))
    raise ValueError(f"Invalid repository entry: {entry!r}")


def load_repos_file(path: str | Path) -> list[Repository]:
    """Load repositories from a YAML or plain-text file.

    YAML files (.yaml/.yml) hold either a list or a mapping with a ``repos``
    list; entries are "owner/repo" strings or {owner, repo} mappings. Any
    other file is read as one "owner/repo" per line, ignoring blank lines
    and # comments. Order is preserved.

    Raises:
        ValueError: If the file is malformed
        OSError: If the file cannot be read
    """
    path = Path(path)
    text = path.read_text()

    if path.suffix.lower() not in (".yaml", ".yml"):
        return [
            Repository.parse(line.split("#", 1)[0])
            for line in text.splitlines()
            if line.split("#", 1)[0].strip()
        ]

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("repos")
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of repositories or a 'repos' list")

    return [parse_repository_entry(entry) for entry in data]
