from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    package_dir: Path
    data_dir: Path
    schema_dir: Path


def get_paths() -> Paths:
    # Content ships as package data next to this file.
    package_dir = Path(__file__).resolve().parent
    data_dir = package_dir / "data"
    return Paths(
        package_dir=package_dir,
        data_dir=data_dir,
        schema_dir=data_dir / "schemas",
    )
