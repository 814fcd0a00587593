"""D3 force-graph page for the repoviz web shell."""

VIZ_HTML = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>repoviz – GitHub Repo Visualizer</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }
  body {
    --bg: #0f172a; --panel: #1e293b; --border: #334155;
    --fg: #e2e8f0; --muted: #94a3b8; --accent: #38bdf8; --danger: #ef4444;
    background: var(--bg);
    color: var(--fg);
    font-family: 'Segoe UI', system-ui, -apple-system, sans-serif;
    overflow: hidden;
    height: 100vh;
    width: 100vw;
    display: flex;
  }
  body.light {
    --bg: #f8fafc; --panel: #e2e8f0; --border: #cbd5e1;
    --fg: #0f172a; --muted: #475569; --accent: #0369a1; --danger: #b91c1c;
  }
  #panel {
    width: 260px; height: 100%;
    background: var(--panel);
    border-right: 1px solid var(--border);
    padding: 16px;
    display: flex; flex-direction: column; gap: 12px;
    z-index: 10;
    font-size: 13px;
  }
  #panel h1 { font-size: 18px; color: var(--accent); }
  #panel input {
    width: 100%; padding: 6px 8px;
    background: var(--bg); color: var(--fg);
    border: 1px solid var(--border); border-radius: 6px;
  }
  #panel button {
    padding: 6px 8px; cursor: pointer;
    background: var(--bg); color: var(--fg);
    border: 1px solid var(--border); border-radius: 6px;
  }
  #panel button.primary { background: var(--accent); color: var(--bg); font-weight: 600; }
  #panel button:disabled { opacity: 0.5; cursor: wait; }
  #panel .row { display: flex; gap: 6px; }
  #panel .row button { flex: 1; }
  #error { color: var(--danger); min-height: 1em; }
  #stats { color: var(--muted); }
  #canvas { position: relative; flex: 1; }
  svg { width: 100%; height: 100%; }

  #tree {
    position: absolute; top: 16px; right: 16px;
    width: 33%; max-height: 50%; overflow: auto;
    background: var(--panel); border: 1px solid var(--border); border-radius: 8px;
    padding: 12px; font-size: 12px; display: none;
  }
  #tree.open { display: block; }
  #tree ul { list-style: none; padding-left: 16px; }
  #tree > ul { padding-left: 0; }
  #tree li span { cursor: pointer; }
  #tree li span.selected { color: var(--accent); font-weight: 600; }

  #info {
    position: fixed; inset: 0; background: #0008;
    display: none; align-items: center; justify-content: center; z-index: 20;
  }
  #info.open { display: flex; }
  #info .dialog {
    background: var(--panel); border: 1px solid var(--border); border-radius: 8px;
    padding: 20px; min-width: 320px; max-width: 480px;
  }
  #info h2 { margin-bottom: 8px; }
  #info p { margin: 4px 0; color: var(--muted); }

  #legend {
    position: absolute; bottom: 16px; right: 16px;
    background: var(--panel); border: 1px solid var(--border); border-radius: 8px;
    padding: 10px 14px; font-size: 12px;
  }
  #legend .row { display: flex; align-items: center; gap: 8px; margin: 3px 0; }
  #legend .swatch { width: 12px; height: 12px; border-radius: 50%; }
</style>
</head>
<body>
<div id="panel">
  <h1>GitHub Repo Visualizer</h1>
  <input id="repo-url" type="text" placeholder="Enter GitHub repository URL">
  <button id="visualize" class="primary">Visualize</button>
  <input id="search" type="text" placeholder="Search nodes...">
  <div class="row">
    <button id="btn-info" title="View repository info">Info</button>
    <button id="btn-labels" title="Show/hide labels">Labels</button>
    <button id="btn-theme" title="Switch theme">Theme</button>
  </div>
  <button id="btn-tree" title="Toggle repository structure">Repository Structure</button>
  <p id="error"></p>
  <p id="stats"></p>
</div>
<div id="canvas">
  <div id="tree"></div>
  <div id="legend"></div>
</div>
<div id="info"><div class="dialog" id="info-body"></div></div>

<script type="module">
import * as d3 from "https://cdn.jsdelivr.net/npm/d3@7/+esm";

const svg = d3.select("#canvas").append("svg");
const gRoot = svg.append("g");
const zoom = d3.zoom().scaleExtent([0.05, 8]).on("zoom", (e) => {
  gRoot.attr("transform", e.transform);
});
svg.call(zoom);

const gLinks = gRoot.append("g").attr("class", "links");
const gNodes = gRoot.append("g").attr("class", "nodes");

// Layout overlay: simulation state keyed by node id. Server nodes are
// copied into these objects and never mutated.
const overlay = new Map();
// Node ids and links of the graph the simulation was last started on.
let layoutKey = null;

const simulation = d3.forceSimulation()
  .force("link", d3.forceLink().id(d => d.id).distance(30))
  .force("charge", d3.forceManyBody().strength(-40))
  .force("center", d3.forceCenter(0, 0))
  .on("tick", ticked);

let state = null;

async function api(method, path, body) {
  const opts = { method, headers: {} };
  if (body !== undefined) {
    opts.headers["Content-Type"] = "application/json";
    opts.body = JSON.stringify(body);
  }
  const resp = await fetch(path, opts);
  if (!resp.ok) throw new Error(`${method} ${path}: ${resp.status}`);
  return resp.json();
}

function simNodes(nodes) {
  const live = new Set();
  const out = nodes.map(n => {
    live.add(n.id);
    const sim = overlay.get(n.id) || {};
    Object.assign(sim, n);
    overlay.set(n.id, sim);
    return sim;
  });
  for (const id of [...overlay.keys()]) {
    if (!live.has(id)) overlay.delete(id);
  }
  return out;
}

function renderGraph(graph) {
  const nodes = simNodes(graph.nodes);
  const key = graph.nodes.map(n => n.id).join("\n") + "\n|\n" +
    graph.links.map(l => l.source + "->" + l.target).join("\n");
  const relayout = key !== layoutKey;
  layoutKey = key;
  const links = relayout
    ? graph.links.map(l => ({ source: l.source, target: l.target }))
    : simulation.force("link").links();

  const endpoint = e => e.id ?? e;
  const link = gLinks.selectAll("line")
    .data(links, d => endpoint(d.source) + "->" + endpoint(d.target));
  link.exit().remove();
  link.enter().append("line")
    .attr("stroke", "#64748b").attr("stroke-opacity", 0.6).attr("stroke-width", 1);

  const node = gNodes.selectAll("g.node").data(nodes, d => d.id);
  node.exit().remove();
  const enter = node.enter().append("g").attr("class", "node")
    .on("click", (e, d) => select(d.id))
    .on("mouseover", (e, d) => select(d.id))
    .call(d3.drag()
      .on("start", (e, d) => { if (!e.active) simulation.alphaTarget(0.3).restart(); d.fx = d.x; d.fy = d.y; })
      .on("drag", (e, d) => { d.fx = e.x; d.fy = e.y; })
      .on("end", (e, d) => { if (!e.active) simulation.alphaTarget(0); d.fx = null; d.fy = null; }));
  enter.append("circle").attr("stroke", "#1e293b").attr("stroke-width", 1);
  enter.append("text").attr("class", "label").attr("font-size", "9px").attr("dx", 8).attr("dy", "0.35em");
  enter.append("title");

  const merged = enter.merge(node);
  merged.select("circle")
    .attr("r", d => d.radius)
    .attr("fill", d => d.color)
    .attr("stroke-width", d => d.id === graph.selected_id ? 3 : 1);
  merged.select("text.label")
    .attr("fill", "currentColor")
    .style("display", graph.show_labels ? null : "none")
    .text(d => d.name);
  merged.select("title").text(d => d.id);

  // Selection, label and theme changes restyle in place; only a
  // different node or link set reheats the layout.
  if (!relayout) return;
  simulation.nodes(nodes);
  simulation.force("link").links(links);
  simulation.alpha(0.5).restart();
}

function ticked() {
  gLinks.selectAll("line")
    .attr("x1", d => d.source.x).attr("y1", d => d.source.y)
    .attr("x2", d => d.target.x).attr("y2", d => d.target.y);
  gNodes.selectAll("g.node")
    .attr("transform", d => `translate(${d.x},${d.y})`);
}

function renderTree(tree, visible, selectedId) {
  const el = document.getElementById("tree");
  el.classList.toggle("open", visible);
  if (!visible) return;
  if (!tree.children.length) {
    el.innerHTML = "<p>No repository structure available. Please enter a valid GitHub repository URL and click 'Visualize'.</p>";
    return;
  }
  const build = (node) => {
    const li = document.createElement("li");
    const span = document.createElement("span");
    span.textContent = (node.children.length ? "📁 " : "📄 ") + node.name;
    if (node.id === selectedId) span.classList.add("selected");
    span.onclick = () => select(node.id);
    li.appendChild(span);
    if (node.children.length) {
      const ul = document.createElement("ul");
      node.children.forEach(c => ul.appendChild(build(c)));
      li.appendChild(ul);
    }
    return li;
  };
  const ul = document.createElement("ul");
  tree.children.forEach(c => ul.appendChild(build(c)));
  el.innerHTML = "<h3>Repository Structure</h3>";
  el.appendChild(ul);
}

function renderInfo(info) {
  const body = document.getElementById("info-body");
  body.replaceChildren();
  const h = document.createElement("h2");
  h.textContent = info ? info.name : "Repository Info";
  body.appendChild(h);
  const lines = info
    ? [`Owner: ${info.owner}`, `Stars: ${info.stargazers_count}`,
       `Forks: ${info.forks_count}`, `Description: ${info.description || "No description"}`]
    : ["No repository loaded."];
  lines.forEach(t => { const p = document.createElement("p"); p.textContent = t; body.appendChild(p); });
}

function renderLegend(graph) {
  const groups = new Map();
  graph.nodes.forEach(n => groups.set(n.group, n.color));
  const el = document.getElementById("legend");
  el.replaceChildren();
  groups.forEach((color, group) => {
    const row = document.createElement("div");
    row.className = "row";
    row.innerHTML = `<span class="swatch" style="background:${color}"></span>`;
    row.appendChild(document.createTextNode(group));
    el.appendChild(row);
  });
}

function render(s) {
  const previous = state;
  state = s;
  document.body.classList.toggle("light", s.theme === "light");
  document.getElementById("error").textContent = s.error || "";
  document.getElementById("visualize").disabled = s.status === "pending";
  document.getElementById("visualize").textContent = s.status === "pending" ? "Loading..." : "Visualize";
  const c = s.counts;
  document.getElementById("stats").textContent =
    `${c.visible_nodes}/${c.nodes} nodes, ${c.visible_edges}/${c.edges} edges`;
  renderGraph(s.graph);
  renderTree(s.tree, s.tree_visible, s.selected_node_id);
  renderInfo(s.info);
  renderLegend(s.graph);
  if (!previous || previous.counts.nodes !== c.nodes) autoFit();
}

function autoFit() {
  const el = svg.node();
  svg.transition().duration(400).call(
    zoom.transform,
    d3.zoomIdentity.translate(el.clientWidth / 2, el.clientHeight / 2)
  );
}

async function select(id) {
  if (state && state.selected_node_id === id) return;
  render(await api("POST", "/api/select", { node_id: id }));
}

document.getElementById("visualize").onclick = async () => {
  const url = document.getElementById("repo-url").value;
  document.getElementById("visualize").disabled = true;
  try {
    render(await api("POST", "/api/visualize", { url }));
  } catch (err) {
    document.getElementById("error").textContent = String(err);
    document.getElementById("visualize").disabled = false;
  }
};
document.getElementById("search").oninput = async (e) => {
  render(await api("POST", "/api/search", { term: e.target.value }));
};
document.getElementById("btn-labels").onclick = async () => render(await api("POST", "/api/toggle/labels"));
document.getElementById("btn-theme").onclick = async () => render(await api("POST", "/api/toggle/theme"));
document.getElementById("btn-tree").onclick = async () => render(await api("POST", "/api/toggle/tree"));
document.getElementById("btn-info").onclick = () => document.getElementById("info").classList.add("open");
document.getElementById("info").onclick = (e) => {
  if (e.target.id === "info") e.currentTarget.classList.remove("open");
};

api("GET", "/api/state").then(render).catch(() => { /* server not ready yet */ });
</script>
</body>
</html>
"""
