"""Legend panel and page-level scripts injected into the folium page."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable

import folium
from folium import Element

from .legend import ICON_COLLAPSED, ICON_EXPANDED, Legend


def script_json(obj: Any) -> str:
    """json.dumps that is safe inside a <script> block.

    Element strings are rendered as Jinja templates, so a brace that opens a
    Jinja tag is written as a unicode escape. Outside of strings JSON never
    puts ``{`` before ``{``, ``%`` or ``#``.
    """
    out = json.dumps(obj).replace("</", "<\\/")
    return re.sub(r"\{(?=[{%#])", r"\\u007b", out)


LEGEND_CSS = r"""
<style>
  #custom-legend {
    position: fixed;
    top: 12px;
    right: 12px;
    z-index: 9999;
    width: 280px;
    max-height: calc(100% - 40px);
    display: flex;
    flex-direction: column;
    background: rgba(255,255,255,0.95);
    border-radius: 10px;
    box-shadow: 0 2px 10px rgba(0,0,0,0.15);
    font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif;
    font-size: 13px;
  }
  #custom-legend .legend-header {
    display: flex;
    align-items: center;
    justify-content: space-between;
    padding: 8px 10px;
    font-weight: 700;
  }
  #legend-toggle { border: none; background: transparent; font-size: 16px; cursor: pointer; }
  #custom-legend .legend-body { padding: 0 10px 10px 10px; overflow-y: auto; }
  #custom-legend.collapsed { width: auto; }
  #custom-legend.collapsed .legend-body { display: none; }
  #legend-filter { width: 100%; box-sizing: border-box; margin-bottom: 6px; }
  .legend-actions { display: flex; gap: 6px; margin-bottom: 6px; }
  .legend-item { display: flex; align-items: center; gap: 8px; padding: 2px 0; }
  .legend-color-swatch { width: 18px; height: 6px; border-radius: 3px; flex: 0 0 auto; }
  .legend-name { flex: 1 1 auto; }
  .custom-tooltip { font-size: 14px; }
</style>
"""

LEGEND_HTML = """
<div id="custom-legend" class="{state}">
  <div class="legend-header">
    <span>Routes</span>
    <button id="legend-toggle" type="button">{icon}</button>
  </div>
  <div class="legend-body">
    <input id="legend-filter" type="text" placeholder="Filter routes..." />
    <div class="legend-actions">
      <button id="check-all" type="button">Check all</button>
      <button id="uncheck-all" type="button">Uncheck all</button>
    </div>
    <div id="legend-list"></div>
  </div>
</div>
"""

LEGEND_JS = r"""
<script>
document.addEventListener('DOMContentLoaded', function() {
  const map = window[window.__routeMapName];
  const rows = window.__routeLegend || [];
  const layers = {};   // route -> L.FeatureGroup
  const boxes = {};    // route -> checkbox

  rows.forEach(r => {
    if (r.layer && window[r.layer]) layers[r.route] = window[r.layer];
  });

  function toggleRoute(route, on) {
    const layer = layers[route];
    if (!layer || !map) return;
    if (on) {
      map.addLayer(layer);
    } else {
      map.removeLayer(layer);
    }
  }

  function setAllRoutes(on) {
    Object.keys(boxes).forEach(route => {
      boxes[route].checked = on;
      toggleRoute(route, on);
    });
  }

  const list = document.getElementById('legend-list');
  list.innerHTML = '';
  rows.forEach(r => {
    const item = document.createElement('div');
    item.className = 'legend-item';
    item.dataset.route = r.route;

    const chk = document.createElement('input');
    chk.type = 'checkbox';
    chk.className = 'legend-checkbox';
    chk.checked = !!r.checked;
    chk.addEventListener('change', e => toggleRoute(r.route, e.target.checked));
    boxes[r.route] = chk;

    const sw = document.createElement('div');
    sw.className = 'legend-color-swatch';
    sw.style.backgroundColor = r.color;

    const name = document.createElement('div');
    name.className = 'legend-name';
    name.textContent = r.label;

    item.appendChild(chk);
    item.appendChild(sw);
    item.appendChild(name);
    list.appendChild(item);
  });

  document.getElementById('legend-toggle').addEventListener('click', () => {
    const root = document.getElementById('custom-legend');
    const btn = document.getElementById('legend-toggle');
    if (root.classList.contains('collapsed')) {
      root.classList.remove('collapsed'); root.classList.add('expanded');
      btn.textContent = window.__legendIcons.expanded;
    } else {
      root.classList.remove('expanded'); root.classList.add('collapsed');
      btn.textContent = window.__legendIcons.collapsed;
    }
  });

  document.getElementById('check-all').addEventListener('click', () => setAllRoutes(true));
  document.getElementById('uncheck-all').addEventListener('click', () => setAllRoutes(false));

  document.getElementById('legend-filter').addEventListener('input', e => {
    const q = e.target.value.trim().toLowerCase();
    document.querySelectorAll('#legend-list .legend-item').forEach(it => {
      const name = it.querySelector('.legend-name').textContent.toLowerCase();
      it.style.display = name.includes(q) ? '' : 'none';
    });
  });

  L.DomEvent.disableClickPropagation(document.getElementById('custom-legend'));
  L.DomEvent.disableScrollPropagation(document.getElementById('custom-legend'));
});
</script>
"""


def add_legend_ui(m: folium.Map, legend: Legend) -> None:
    """Inject the legend panel, its data and the handlers that drive the route layers."""
    root = m.get_root()
    root.html.add_child(Element(LEGEND_CSS))
    root.html.add_child(
        Element(
            LEGEND_HTML.format(
                state="collapsed" if legend.collapsed else "expanded",
                icon=legend.toggle_icon,
            )
        )
    )
    root.html.add_child(Element(f"<script>window.__routeMapName = {script_json(m.get_name())};</script>"))
    root.html.add_child(Element(f"<script>window.__routeLegend = {script_json(legend.to_payload())};</script>"))
    root.html.add_child(
        Element(
            "<script>window.__legendIcons = "
            f"{script_json({'collapsed': ICON_COLLAPSED, 'expanded': ICON_EXPANDED})};</script>"
        )
    )
    root.html.add_child(Element(LEGEND_JS))


def add_alert(m: folium.Map, message: str) -> None:
    m.get_root().html.add_child(
        Element(f"<script>window.addEventListener('load', function() {{ alert({script_json(message)}); }});</script>")
    )


def add_console_warnings(m: folium.Map, warnings: Iterable[str]) -> None:
    lines = "".join(f"console.warn({script_json(w)});" for w in warnings)
    m.get_root().html.add_child(Element(f"<script>{lines}</script>"))
