"""Inline stylesheet and browser runtime for the generated page.

The runtime swaps layouts, computes focus transforms from the baked region
bounds and the live container size, clamps drag/wheel zoom with the same rule
as `viewport.constrain`, and toggles panel classes.
"""

from __future__ import annotations


PAGE_CSS = """
* { box-sizing: border-box; }
html, body { margin: 0; height: 100%; font-family: -apple-system, "Segoe UI", Roboto, sans-serif; color: #2d3436; }
body { display: flex; flex-direction: column; background: #f5f6fa; }
header { display: flex; align-items: center; justify-content: space-between; padding: 0.75rem 1rem; background: #fff; box-shadow: 0 1px 3px rgba(0,0,0,0.08); z-index: 5; }
header h1 { margin: 0; font-size: 1.25rem; }
header .actions { display: flex; gap: 0.5rem; }
header button { border: 1px solid #dfe6e9; background: #fff; border-radius: 999px; padding: 0.4rem 0.9rem; cursor: pointer; font-size: 0.875rem; }
header button:hover { background: #f4ead5; }
#map-container { position: relative; flex: 1; overflow: hidden; touch-action: none; }
#map-container svg { width: 100%; height: 100%; display: block; cursor: grab; }
#map-container svg[hidden] { display: none; }
.map-error { padding: 2rem; text-align: center; color: #636e72; }
.map-error .hint { font-size: 0.875rem; }
.zoom-layer { transform-origin: 0 0; transform-box: view-box; }
.ocean { fill: #eef3f7; }
.country-shadow { fill: rgba(0,0,0,0.15); stroke: none; }
.country { fill: #ffffff; stroke: #b2bec3; stroke-width: 0.4; vector-effect: non-scaling-stroke; cursor: pointer; transition: transform 0.15s ease; }
.country:hover { fill: #dfe6e9; transform: translate(-0.6px, -0.6px); }
.country.visited { fill: url(#visited-hatch); }
.country.visited:hover { fill: url(#visited-hatch-hover); }
.country.active { fill: #f4ead5; stroke: #c4956a; stroke-width: 1.2; }
.country.visited.active { fill: url(#visited-hatch-active); }
#sidebar { position: fixed; top: 0; left: 0; bottom: 0; max-width: 100%; background: #fff; transform: translateX(-100%); transition: transform 0.3s ease; z-index: 20; overflow-y: auto; padding: 1.25rem; box-shadow: 2px 0 12px rgba(0,0,0,0.12); }
#sidebar.open { transform: translateX(0); }
#sidebar-overlay { position: fixed; inset: 0; display: none; z-index: 10; }
#sidebar-overlay.visible { display: block; }
.sidebar-header { display: flex; align-items: center; justify-content: space-between; }
.sidebar-flag { font-size: 1.75rem; margin-right: 0.5rem; }
.sidebar-country { font-size: 1.5rem; font-weight: 700; }
.close-btn { border: none; background: none; font-size: 1.5rem; cursor: pointer; color: #636e72; }
.trip-card { border: 1px solid #dfe6e9; border-radius: 12px; padding: 0.9rem; margin: 0.75rem 0; }
.trip-card.highlighted { border-color: #c4956a; background: #fdf8ef; }
.trip-restaurant { font-weight: 600; margin-bottom: 0.35rem; }
.trip-meta { display: flex; flex-wrap: wrap; gap: 0.75rem; font-size: 0.85rem; color: #636e72; }
.trip-notes { margin-top: 0.5rem; font-style: italic; color: #636e72; }
.find-btn { display: inline-block; margin-top: 0.75rem; padding: 0.5rem 1rem; border-radius: 999px; background: #c4956a; color: #fff; text-decoration: none; }
.find-btn-secondary { background: #fff; color: #c4956a; border: 1px solid #c4956a; }
.empty-state { text-align: center; padding: 2rem 0; color: #636e72; }
.empty-state-icon { font-size: 2.5rem; }
.modal-overlay { position: fixed; inset: 0; background: rgba(45,52,54,0.45); display: none; align-items: center; justify-content: center; z-index: 30; }
.modal-overlay.visible { display: flex; }
.modal { background: #fff; border-radius: 16px; padding: 1.25rem; width: min(560px, 92vw); max-height: 86vh; overflow-y: auto; }
.modal-header { display: flex; justify-content: space-between; align-items: center; }
.stats-overview { text-align: center; margin-bottom: 1rem; }
.stats-big-number { font-size: 2.5rem; font-weight: 700; }
.stats-percentage { color: #c4956a; font-weight: 600; }
.continent-row { display: flex; justify-content: space-between; padding: 0.3rem 0; border-bottom: 1px solid #f1f2f6; }
.carousel { display: flex; gap: 0.75rem; overflow-x: auto; padding-bottom: 0.5rem; }
.carousel-item { flex: 0 0 auto; min-width: 110px; text-align: center; border: 1px solid #dfe6e9; border-radius: 12px; padding: 0.75rem; cursor: pointer; }
.carousel-flag { font-size: 1.75rem; }
.streak-header, .streak-year { display: flex; align-items: center; gap: 0.5rem; margin: 0.2rem 0; }
.streak-year-label { width: 3rem; font-size: 0.8rem; color: #636e72; }
.streak-months { display: grid; grid-template-columns: repeat(12, 1fr); gap: 4px; flex: 1; }
.streak-month-header { text-align: center; font-size: 0.75rem; color: #636e72; }
.streak-month { height: 22px; border-radius: 4px; background: #f1f2f6; }
.streak-month.active { background: #c4956a; cursor: pointer; }
.streak-month.future { background: transparent; border: 1px dashed #dfe6e9; }
.streak-summary { margin-top: 0.75rem; text-align: center; font-weight: 600; }
"""


def panel_css(sidebar_width: float, narrow_breakpoint: float) -> str:
    """Sidebar sizing and the bottom-docked rule, kept in step with the focus anchor."""
    return "\n".join(
        [
            f"#sidebar {{ width: {sidebar_width:g}px; }}",
            f"@media (max-width: {narrow_breakpoint:g}px), (orientation: portrait) {{",
            "  #sidebar { top: auto; right: 0; width: 100%; height: 55%; transform: translateY(100%); "
            "border-radius: 16px 16px 0 0; }",
            "  #sidebar.open { transform: translateY(0); }",
            "}",
        ]
    )


RUNTIME_JS = """
(function () {
  "use strict";
  var data = JSON.parse(document.getElementById("clubmap-data").textContent);
  var container = document.getElementById("map-container");
  var state = { layout: null, svg: null, layer: null, t: [1, 0, 0], active: null, drag: null, dragged: false };
  var resizeTimer = null;

  function byId(id) { return document.getElementById(id); }
  function hasMap() { return !!container.querySelector("svg"); }
  function layoutName() {
    var w = container.clientWidth || 960, h = container.clientHeight || 500;
    return h > w ? "portrait" : "landscape";
  }
  function current() { return data.layouts[state.layout]; }

  function apply(t, animate) {
    state.t = t;
    state.layer.style.transition = animate ? "transform " + data.transitionMs + "ms ease" : "none";
    state.layer.style.transform = "translate(" + t[1] + "px," + t[2] + "px) scale(" + t[0] + ")";
  }

  function constrain(t) {
    var L = current(), e = L.translateExtent, k = t[0], x = t[1], y = t[2];
    var dx0 = (0 - x) / k - e[0][0], dx1 = (L.width - x) / k - e[1][0];
    var dy0 = (0 - y) / k - e[0][1], dy1 = (L.height - y) / k - e[1][1];
    var sx = dx1 > dx0 ? (dx0 + dx1) / 2 : Math.min(0, dx0) || Math.max(0, dx1);
    var sy = dy1 > dy0 ? (dy0 + dy1) / 2 : Math.min(0, dy0) || Math.max(0, dy1);
    return [k, x + k * sx, y + k * sy];
  }

  function toView(clientX, clientY) {
    var ctm = state.svg.getScreenCTM();
    if (!ctm) {
      var r = container.getBoundingClientRect();
      return [clientX - r.left, clientY - r.top];
    }
    var p = state.svg.createSVGPoint();
    p.x = clientX; p.y = clientY;
    var q = p.matrixTransform(ctm.inverse());
    return [q.x, q.y];
  }

  // Mirrors ViewportController.focus_transform, measured in live CSS pixels.
  function focusTransform(code) {
    var b = current().bounds[code], F = data.focus;
    if (!b) { return null; }
    var r = container.getBoundingClientRect();
    var w = r.width, h = r.height;
    var tl = toView(r.left, r.top), br = toView(r.right, r.bottom);
    var vw = br[0] - tl[0], vh = br[1] - tl[1];
    var docked = window.innerWidth <= F.narrowBreakpoint || h > w;
    var anchor = docked
      ? toView(r.left + w / 2, r.top + h * F.bottomAnchorY)
      : toView(r.left + F.sidebarWidth + (w - F.sidebarWidth) / 2, r.top + h / 2);
    var ratio = Math.max((b[1][0] - b[0][0]) / vw, (b[1][1] - b[0][1]) / vh);
    var k = ratio > 0 ? Math.min(F.maxScale, F.padding / ratio) : F.maxScale;
    var cx = (b[0][0] + b[1][0]) / 2, cy = (b[0][1] + b[1][1]) / 2;
    return [k, anchor[0] - cx * k, anchor[1] - cy * k];
  }

  function useLayout(name) {
    state.layout = name;
    container.querySelectorAll("svg.map").forEach(function (svg) {
      svg.hidden = svg.getAttribute("data-layout") !== name;
      if (!svg.hidden) { state.svg = svg; state.layer = svg.querySelector(".zoom-layer"); }
    });
    apply(current()["default"], false);
  }

  function clearActive() {
    container.querySelectorAll("path.country.active").forEach(function (p) { p.classList.remove("active"); });
    state.active = null;
  }

  function markActive(code) {
    container.querySelectorAll("svg.map").forEach(function (svg) {
      var paths = svg.querySelectorAll('path.country[data-id="' + code + '"]');
      if (!paths.length) { return; }
      var p = paths[paths.length - 1];
      p.classList.add("active");
      p.parentNode.appendChild(p);
    });
    state.active = code;
  }

  function showSidebar(title, html, highlight) {
    byId("sidebar-title").innerHTML = title;
    var list = byId("trips-list");
    list.innerHTML = html;
    byId("sidebar").classList.add("open");
    byId("sidebar-overlay").classList.add("visible");
    if (highlight) {
      list.querySelectorAll(".trip-card").forEach(function (card) {
        if (card.getAttribute("data-date") === highlight) {
          card.classList.add("highlighted");
          setTimeout(function () { card.scrollIntoView({ behavior: "smooth", block: "center" }); }, 100);
        }
      });
    }
  }

  function select(code, name, highlight) {
    clearActive();
    if (!code && name) { code = data.names[name.toLowerCase()] || null; }
    if (code && data.details[code]) {
      markActive(code);
      var t = hasMap() ? focusTransform(code) : null;
      if (t) { apply(t, true); }
      showSidebar(data.titles[code], data.details[code], highlight);
      return;
    }
    var extra = data.extra[(name || "").toLowerCase()];
    if (extra) { showSidebar(extra.title, extra.html, highlight); }
  }

  function closeSidebar() {
    byId("sidebar").classList.remove("open");
    byId("sidebar-overlay").classList.remove("visible");
    clearActive();
  }
  function openModal(id) { byId(id).classList.add("visible"); }
  function closeModal(id) { byId(id).classList.remove("visible"); }

  function discover() {
    if (!hasMap()) { return; }
    if (!data.unvisited.length) { window.alert(data.notice); return; }
    select(data.unvisited[Math.floor(Math.random() * data.unvisited.length)], null, null);
  }

  function wireMap() {
    useLayout(layoutName());
    container.addEventListener("wheel", function (evt) {
      evt.preventDefault();
      var L = current(), t = state.t, p = toView(evt.clientX, evt.clientY);
      var k = Math.min(L.maxZoom, Math.max(L.minZoom, t[0] * Math.pow(2, -evt.deltaY * data.wheel)));
      var mx = (p[0] - t[1]) / t[0], my = (p[1] - t[2]) / t[0];
      apply(constrain([k, p[0] - mx * k, p[1] - my * k]), false);
    }, { passive: false });
    container.addEventListener("pointerdown", function (evt) {
      state.drag = toView(evt.clientX, evt.clientY); state.dragged = false;
    });
    window.addEventListener("pointermove", function (evt) {
      if (!state.drag) { return; }
      var p = toView(evt.clientX, evt.clientY), dx = p[0] - state.drag[0], dy = p[1] - state.drag[1];
      if (Math.abs(dx) + Math.abs(dy) > 3) { state.dragged = true; }
      if (state.dragged) {
        apply(constrain([state.t[0], state.t[1] + dx, state.t[2] + dy]), false);
        state.drag = p;
      }
    });
    window.addEventListener("pointerup", function () { state.drag = null; });
    container.addEventListener("click", function (evt) {
      var target = evt.target.closest ? evt.target.closest("path.country") : null;
      if (!target || state.dragged) { return; }
      select(target.getAttribute("data-id"), target.getAttribute("data-name"), null);
    });
    var onResize = function () {
      clearTimeout(resizeTimer);
      resizeTimer = setTimeout(function () { useLayout(layoutName()); }, data.debounceMs);
    };
    if (window.ResizeObserver) { new ResizeObserver(onResize).observe(container); }
    else { window.addEventListener("resize", onResize); }
  }

  function wirePanels() {
    byId("sidebar-close").addEventListener("click", closeSidebar);
    byId("sidebar-overlay").addEventListener("click", closeSidebar);
    byId("discover-btn").addEventListener("click", discover);
    byId("stats-btn").addEventListener("click", function () { openModal("stats-overlay"); });
    byId("calendar-btn").addEventListener("click", function () { openModal("calendar-overlay"); });
    ["stats", "calendar"].forEach(function (name) {
      var overlay = byId(name + "-overlay");
      byId(name + "-close").addEventListener("click", function () { closeModal(name + "-overlay"); });
      overlay.addEventListener("click", function (evt) { if (evt.target === overlay) { closeModal(name + "-overlay"); } });
    });
    byId("stats-content").querySelectorAll(".carousel-item").forEach(function (item) {
      item.addEventListener("click", function () {
        closeModal("stats-overlay");
        select(item.getAttribute("data-country-id"), item.getAttribute("data-country"), null);
      });
    });
    byId("calendar-content").querySelectorAll(".streak-month.active").forEach(function (cell) {
      cell.addEventListener("click", function () {
        closeModal("calendar-overlay");
        select(null, cell.getAttribute("data-trip-country"), cell.getAttribute("data-trip-date"));
      });
    });
    document.addEventListener("keydown", function (evt) {
      if (evt.key === "Escape") { closeSidebar(); closeModal("stats-overlay"); closeModal("calendar-overlay"); }
    });
  }

  document.addEventListener("DOMContentLoaded", function () {
    if (hasMap()) { wireMap(); }
    wirePanels();
  });
})();
"""
