from __future__ import annotations

from pathlib import Path
from typing import Iterable

import yaml
from pydantic import ValidationError

from urlhealth.models import TargetFile

YAML_SUFFIXES = {".yml", ".yaml"}


class TargetFileError(RuntimeError):
    pass


def _clean(lines: Iterable[str]) -> list[str]:
    return [line.strip() for line in lines if line.strip()]


def _read_yaml_targets(path: Path, text: str) -> list[str]:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise TargetFileError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TargetFileError(f"{path} must contain a mapping with a 'targets' list")
    try:
        tf = TargetFile.model_validate(data)
    except ValidationError as exc:
        raise TargetFileError(f"Invalid target file {path}: {exc}") from exc
    return _clean(tf.targets)


def read_targets_file(path: str | Path) -> list[str]:
    """
    Read a URL list from path.

    Plain files hold one URL per line; YAML files hold {targets: [...]}.
    Surrounding whitespace is trimmed and blank entries are dropped.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TargetFileError(f"Failed to read URLs from {path}: {exc}") from exc

    if path.suffix.lower() in YAML_SUFFIXES:
        return _read_yaml_targets(path, text)
    return _clean(text.splitlines())


def build_target_set(
    urls: Iterable[str] = (), file: str | Path | None = None
) -> tuple[str, ...]:
    """Positional URLs first, then file URLs. Duplicates are kept."""
    urls = _clean(urls)
    if file is None and not urls:
        raise TargetFileError("Please specify --file <path> or one or more URLs.")

    targets = list(urls)
    if file is not None:
        targets.extend(read_targets_file(file))

    if not targets:
        raise TargetFileError(f"No URLs found in {file}")
    return tuple(targets)
