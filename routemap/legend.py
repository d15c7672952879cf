"""Legend state: one checkbox row per route layer.

The page script owns the browser-side transitions (toggle, check/uncheck
all, filter, collapse). This model holds the initial state written into the
page and is what the CLI flips for ``--show-all``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from .config import MARKER_FALLBACK_COLOR

if TYPE_CHECKING:
    from .aggregate import RouteStats
    from .render import RouteVisual

ICON_COLLAPSED = "☰"
ICON_EXPANDED = "✖"


@dataclass
class LegendRow:
    route: str
    color: str
    station_count: int = 0
    checked: bool = False

    @property
    def label(self) -> str:
        return f"{self.route} ({self.station_count} stations)"


@dataclass
class Legend:
    rows: List[LegendRow] = field(default_factory=list)
    visuals: Dict[str, "RouteVisual"] = field(default_factory=dict)
    collapsed: bool = False

    @classmethod
    def from_visuals(
        cls,
        visuals: Mapping[str, "RouteVisual"],
        stats: Mapping[str, "RouteStats"],
        collapsed: bool = False,
    ) -> "Legend":
        rows = []
        for name, v in visuals.items():
            s = stats.get(name)
            rows.append(
                LegendRow(
                    route=name,
                    color=v.color if s else MARKER_FALLBACK_COLOR,
                    station_count=s.station_count if s else 0,
                    checked=v.visible,
                )
            )
        return cls(rows=rows, visuals=dict(visuals), collapsed=collapsed)

    def set_all(self, checked: bool) -> None:
        for r in self.rows:
            r.checked = checked
            v = self.visuals.get(r.route)
            if v is not None:
                v.visible = checked

    @property
    def toggle_icon(self) -> str:
        return ICON_COLLAPSED if self.collapsed else ICON_EXPANDED

    def to_payload(self) -> List[Dict[str, Any]]:
        return [
            {
                "route": r.route,
                "label": r.label,
                "color": r.color,
                "checked": r.checked,
                "layer": self.visuals[r.route].js_name if r.route in self.visuals else None,
            }
            for r in self.rows
        ]
