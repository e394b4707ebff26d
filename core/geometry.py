"""Wall geometry.

The wall is a grid of screens forming one virtual surface. Modules are
instantiated against a snapshot of the geometry as it is at that moment.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Geometry:
    x: int = 0
    y: int = 0
    width: int = 1920
    height: int = 1080
    rows: int = 1
    cols: int = 1

    def as_dict(self) -> Dict:
        return {
            "x": self.x, "y": self.y,
            "width": self.width, "height": self.height,
            "rows": self.rows, "cols": self.cols,
        }


class WallGeometry:
    """Holds the current geometry; read synchronously at instantiation time."""

    def __init__(self, geometry: Geometry = None):
        self._geometry = geometry or Geometry()

    @classmethod
    def from_config(cls, config: Dict) -> "WallGeometry":
        fields = {k: int(v) for k, v in (config or {}).items() if k in Geometry.__dataclass_fields__}
        return cls(Geometry(**fields))

    def current_geometry(self) -> Geometry:
        return self._geometry

    def update(self, **fields) -> Geometry:
        """Replace some fields. Modules already running keep their snapshot."""
        self._geometry = replace(self._geometry, **fields)
        logger.info("Wall geometry now %s", self._geometry)
        return self._geometry
