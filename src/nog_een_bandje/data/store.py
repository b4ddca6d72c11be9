from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

import numpy as np

from nog_een_bandje.utils.io import load_json


MIN_YEAR = 2008
MAX_YEAR = 2019

MIN_COUNT = 1
MAX_COUNT = 5
DEFAULT_COUNT = 1

MIN_QUERY_LENGTH = 2


class LoadError(RuntimeError):
    """Raised when the performance data file is missing or malformed."""


class Festival(str, Enum):
    PINKPOP = "Pinkpop"
    LOWLANDS = "Lowlands"


@dataclass(frozen=True, slots=True)
class Performance:
    name: str
    festival: Festival
    year: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "festival": self.festival.value, "year": self.year}


def clamp_count(value: int) -> int:
    return max(MIN_COUNT, min(MAX_COUNT, value))


def parse_count(raw: str | None) -> int:
    """Turn a raw ``count`` query value into a sample size.

    Only plain ASCII integers (optionally negative) are accepted; anything
    else falls back to ``DEFAULT_COUNT``. Accepted values are clamped to
    ``[MIN_COUNT, MAX_COUNT]``.
    """
    if raw is None:
        return DEFAULT_COUNT
    text = raw.strip()
    digits = text[1:] if text.startswith("-") else text
    if not (digits.isascii() and digits.isdigit()):
        return DEFAULT_COUNT
    return clamp_count(int(text))


class Dataset:
    """Immutable, ordered collection of performances shared by all requests."""

    __slots__ = ("_performances",)

    def __init__(self, performances: list[Performance] | tuple[Performance, ...]) -> None:
        self._performances: tuple[Performance, ...] = tuple(performances)

    def __len__(self) -> int:
        return len(self._performances)

    def __iter__(self) -> Iterator[Performance]:
        return iter(self._performances)

    def __getitem__(self, index: int) -> Performance:
        return self._performances[index]

    def all(self) -> tuple[Performance, ...]:
        return self._performances

    def sample(self, n: int, rng: np.random.Generator | None = None) -> list[Performance]:
        """Draw ``n`` performances (clamped to 1..5) uniformly at random.

        Draws are without replacement unless the dataset holds fewer than
        the clamped ``n`` performances. An empty dataset gives an empty list.
        """
        size = len(self._performances)
        if size == 0:
            return []
        count = clamp_count(n)
        rng = rng or np.random.default_rng()
        picks = rng.choice(size, size=count, replace=size < count)
        return [self._performances[int(i)] for i in picks]

    def search(self, query: str) -> list[Performance]:
        needle = query.strip().lower()
        if len(needle) < MIN_QUERY_LENGTH:
            return []
        return [p for p in self._performances if needle in p.name.lower()]

    def to_records(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self._performances]


def _parse_festival(raw: Any, where: str) -> Festival:
    if not isinstance(raw, str):
        raise LoadError(f"{where}.name must be a string, got {type(raw).__name__}")
    try:
        return Festival(raw)
    except ValueError as exc:
        allowed = ", ".join(f.value for f in Festival)
        raise LoadError(f"{where}.name '{raw}' is not one of: {allowed}") from exc


def _parse_year(raw: Any, where: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise LoadError(f"{where}.year must be an integer, got {raw!r}")
    if not MIN_YEAR <= raw <= MAX_YEAR:
        raise LoadError(f"{where}.year {raw} is outside {MIN_YEAR}-{MAX_YEAR}")
    return raw


def _parse_artists(raw: Any, where: str) -> list[str]:
    if not isinstance(raw, list):
        raise LoadError(f"{where}.artists must be a list")
    names: list[str] = []
    for idx, artist in enumerate(raw):
        if not isinstance(artist, str) or not artist.strip():
            raise LoadError(f"{where}.artists[{idx}] must be a non-empty string")
        try:
            artist.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise LoadError(f"{where}.artists[{idx}] is not valid UTF-8 text") from exc
        names.append(artist)
    return names


def _flatten(data: Any) -> list[Performance]:
    if not isinstance(data, dict) or not isinstance(data.get("festivals"), list):
        raise LoadError("Top level must be an object with a 'festivals' list")

    performances: list[Performance] = []
    for f_idx, festival_entry in enumerate(data["festivals"]):
        where = f"festivals[{f_idx}]"
        if not isinstance(festival_entry, dict):
            raise LoadError(f"{where} must be an object")
        festival = _parse_festival(festival_entry.get("name"), where)

        years = festival_entry.get("years")
        if not isinstance(years, list):
            raise LoadError(f"{where}.years must be a list")
        for y_idx, year_entry in enumerate(years):
            year_where = f"{where}.years[{y_idx}]"
            if not isinstance(year_entry, dict):
                raise LoadError(f"{year_where} must be an object")
            year = _parse_year(year_entry.get("year"), year_where)
            for artist in _parse_artists(year_entry.get("artists"), year_where):
                performances.append(Performance(name=artist, festival=festival, year=year))
    return performances


def load(path: str | Path) -> Dataset:
    """Read ``bands.json`` and flatten it into a :class:`Dataset`.

    The file nests artists under years under festivals; the flattened order
    follows the file. Any missing, unreadable or structurally invalid file
    raises :class:`LoadError`.
    """
    target = Path(path)
    if not target.exists():
        raise LoadError(f"Failed to read {target}. Make sure the file is in the working directory.")
    try:
        data = load_json(target)
    except json.JSONDecodeError as exc:
        raise LoadError(f"Failed to parse {target}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"Failed to read {target}: {exc}") from exc

    return Dataset(_flatten(data))
