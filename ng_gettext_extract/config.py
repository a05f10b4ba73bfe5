from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from pathlib import Path

import polib

STRATEGIES = ("html", "js")
DEFAULT_EXTENSIONS = {
    "htm": "html",
    "html": "html",
    "php": "html",
    "phtml": "html",
    "tml": "html",
    "ejs": "html",
    "erb": "html",
    "js": "js",
}


@dataclass
class ExtractorOptions:
    start_delim: str = "{{"
    end_delim: str = "}}"
    marker_name: str = "gettext"
    marker_names: list[str] = field(default_factory=list)
    line_numbers: bool = True
    extensions: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_EXTENSIONS))
    post_process: Callable[[polib.POFile], None] | None = None

    def all_marker_names(self) -> list[str]:
        """Primary marker name first, then the extra ones without repeats."""
        names: list[str] = []
        for name in [self.marker_name, *self.marker_names]:
            if name and name not in names:
                names.append(name)
        return names

    def validate(self) -> None:
        for extension, strategy in self.extensions.items():
            if strategy not in STRATEGIES:
                raise ValueError(
                    f"Unknown strategy {strategy!r} for extension {extension!r}; "
                    f"expected one of {', '.join(STRATEGIES)}"
                )


def normalize_extension(raw: str) -> str:
    return raw.strip().lstrip(".").lower()


def load_options(path: Path, base: ExtractorOptions | None = None) -> ExtractorOptions:
    """Read options from a JSON object with the ``ExtractorOptions`` field names."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Options file must contain a JSON object: {path}")

    options = base or ExtractorOptions()
    known = {f.name for f in fields(ExtractorOptions)} - {"post_process"}
    for key, value in payload.items():
        if key not in known:
            raise ValueError(f"Unknown option {key!r} in {path}")
        if key in ("start_delim", "end_delim", "marker_name"):
            if not isinstance(value, str):
                raise ValueError(f"Option {key!r} must be a string")
        elif key == "marker_names":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError("Option 'marker_names' must be a list of strings")
            value = list(value)
        elif key == "line_numbers":
            if not isinstance(value, bool):
                raise ValueError("Option 'line_numbers' must be true or false")
        elif key == "extensions":
            if not isinstance(value, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in value.items()
            ):
                raise ValueError("Option 'extensions' must map extensions to strategies")
            value = {normalize_extension(k): v for k, v in value.items()}
        setattr(options, key, value)

    options.validate()
    return options
