from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class DependencyNode:
    name: str
    dependencies: List['DependencyNode'] = field(default_factory=list)


@dataclass
class RenderArtifacts:
    source: Path
    vector: Path
    raster: Path

    # Files actually written, in pipeline order
    produced: List[Path] = field(default_factory=list)

    @classmethod
    def from_base(cls, base_name: str) -> "RenderArtifacts":
        return cls(
            source=Path(f"{base_name}.dot"),
            vector=Path(f"{base_name}.svg"),
            raster=Path(f"{base_name}.png"),
        )
