from __future__ import annotations

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from nog_een_bandje.data.store import MAX_COUNT, Dataset, parse_count
from nog_een_bandje.utils.io import dump_json


DOWNLOAD_FILENAME = "all_bands.json"


def _index_html() -> str:
    return """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Festival Band Randomizer &amp; Search</title>
  <style>
    :root {
      --bg: #111827;
      --panel: #1f2937;
      --field: #374151;
      --border: #4b5563;
      --text: #e5e7eb;
      --muted: #9ca3af;
      --purple: #a78bfa;
      --purple-strong: #7c3aed;
      --teal: #2dd4bf;
      --danger: #f87171;
    }
    * { box-sizing: border-box; }
    body {
      margin: 0;
      background: var(--bg);
      color: var(--text);
      font-family: "Inter", "Segoe UI", system-ui, sans-serif;
    }
    .wrap { max-width: 56rem; margin: 0 auto; padding: 2rem 1rem 4rem; }
    header { text-align: center; margin-bottom: 2.5rem; }
    h1 { font-size: 2.6rem; margin: 0 0 .5rem; color: #fff; }
    header p { color: var(--muted); font-size: 1.1rem; margin: 0; }
    section { margin-bottom: 3rem; }
    h2 {
      font-size: 1.5rem;
      padding-bottom: .5rem;
      border-bottom: 2px solid var(--field);
    }
    #randomizer h2 { color: var(--purple); }
    #search h2 { color: var(--teal); }
    .panel { background: var(--panel); border-radius: .75rem; padding: 1.5rem; }
    form { display: flex; flex-wrap: wrap; gap: 1rem; align-items: center; }
    label { font-size: 1.1rem; font-weight: 500; }
    select, input {
      background: var(--field);
      color: #fff;
      border: 1px solid var(--border);
      border-radius: .4rem;
      padding: .6rem;
      font-size: 1rem;
    }
    select { flex: 1; }
    input { width: 100%; font-size: 1.1rem; }
    button, .download {
      background: var(--purple-strong);
      color: #fff;
      border: 0;
      border-radius: .4rem;
      padding: .6rem 1.5rem;
      font-weight: 700;
      cursor: pointer;
      text-decoration: none;
    }
    button:disabled { opacity: .6; cursor: wait; }
    .download { background: var(--field); color: var(--text); display: inline-block; }
    .results { margin-top: 1.5rem; display: grid; gap: 1rem; }
    .card {
      background: var(--panel);
      padding: 1.2rem;
      border-radius: .6rem;
      border-left: 4px solid var(--accent);
    }
    .card h3 { margin: 0; font-size: 1.5rem; color: var(--accent); }
    .card p { margin: .3rem 0 0; color: var(--muted); }
    .card strong { color: var(--text); }
    .note { text-align: center; color: var(--muted); }
    .error { text-align: center; color: var(--danger); }
    #download { text-align: center; }
  </style>
</head>
<body>
  <div class="wrap">
    <header>
      <h1>Festival Artist Explorer</h1>
      <p>Discover artists from Pinkpop &amp; Lowlands (2008-2019)</p>
    </header>

    <main>
      <section id="randomizer">
        <h2>Get Random Bands</h2>
        <div class="panel">
          <form id="band-form">
            <label for="count-select">How many bands?</label>
            <select id="count-select">
              <option value="1">1</option>
              <option value="2">2</option>
              <option value="3" selected>3</option>
              <option value="4">4</option>
              <option value="5">5</option>
            </select>
            <button type="submit" id="random-btn">Discover</button>
          </form>
        </div>
        <div id="random-results" class="results"></div>
      </section>

      <section id="search">
        <h2>Search for an Artist</h2>
        <div class="panel">
          <input type="text" id="search-input" autocomplete="off"
                 placeholder="Type an artist name (e.g., 'kaiser')..." />
        </div>
        <div id="search-results" class="results"></div>
      </section>

      <section id="download">
        <a class="download" href="/api/all-bands">Download Full List (.json)</a>
      </section>
    </main>
  </div>

  <script>
    const MIN_QUERY_LENGTH = 2;
    const randomForm = document.getElementById("band-form");
    const countSelect = document.getElementById("count-select");
    const randomBtn = document.getElementById("random-btn");
    const randomResults = document.getElementById("random-results");
    const searchInput = document.getElementById("search-input");
    const searchResults = document.getElementById("search-results");

    let allPerformances = [];
    let isDataFetched = false;

    function message(container, text, cls) {
      container.innerHTML = "";
      const p = document.createElement("p");
      p.className = cls || "note";
      p.textContent = text;
      container.appendChild(p);
    }

    function createCard(perf, accent) {
      const card = document.createElement("div");
      card.className = "card";
      card.style.setProperty("--accent", accent);

      const title = document.createElement("h3");
      title.textContent = perf.name;

      const line = document.createElement("p");
      const festival = document.createElement("strong");
      festival.textContent = perf.festival;
      const year = document.createElement("strong");
      year.textContent = String(perf.year);
      line.append("Played at ", festival, " in ", year);

      card.append(title, line);
      return card;
    }

    function displayPerformances(performances, container, accent) {
      container.innerHTML = "";
      performances.forEach((perf) => container.appendChild(createCard(perf, accent)));
    }

    randomForm.addEventListener("submit", async (event) => {
      event.preventDefault();
      randomBtn.disabled = true;
      randomBtn.textContent = "Loading...";
      message(randomResults, "Fetching artists...");
      try {
        const response = await fetch(`/api/random-bands?count=${countSelect.value}`);
        if (!response.ok) throw new Error(`HTTP error! status: ${response.status}`);
        displayPerformances(await response.json(), randomResults, "var(--purple)");
      } catch (error) {
        console.error("Failed to fetch random bands:", error);
        message(randomResults, "Failed to load bands. Please try again.", "error");
      } finally {
        randomBtn.disabled = false;
        randomBtn.textContent = "Discover";
      }
    });

    async function fetchAllBandData() {
      try {
        const response = await fetch("/api/all-bands");
        if (!response.ok) throw new Error("Network response was not ok");
        allPerformances = await response.json();
        isDataFetched = true;
        console.log(`Fetched ${allPerformances.length} total performances.`);
        handleSearch();
      } catch (error) {
        console.error("Could not fetch all band data:", error);
        message(searchResults, "Could not load search data. Please refresh.", "error");
      }
    }

    function handleSearch() {
      if (!isDataFetched) {
        message(searchResults, "Start typing to search...");
        return;
      }
      const query = searchInput.value.trim().toLowerCase();
      if (query.length < MIN_QUERY_LENGTH) {
        searchResults.innerHTML = "";
        return;
      }
      const filtered = allPerformances.filter((perf) => perf.name.toLowerCase().includes(query));
      if (filtered.length === 0) {
        message(searchResults, `No matches found for "${searchInput.value}".`);
        return;
      }
      displayPerformances(filtered, searchResults, "var(--teal)");
    }

    searchInput.addEventListener("input", handleSearch);
    searchInput.addEventListener("focus", () => {
      if (!isDataFetched) fetchAllBandData();
    }, { once: true });
  </script>
</body>
</html>
"""


class _Handler(BaseHTTPRequestHandler):
    dataset: Dataset
    all_bands_text: str
    html_text: str
    access_log = False
    send_body = True

    def _send(self, status: int, body: bytes, content_type: str, extra: dict[str, str] | None = None) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Access-Control-Allow-Origin", "*")
        for key, value in (extra or {}).items():
            self.send_header(key, value)
        self.end_headers()
        if self.send_body:
            self.wfile.write(body)

    def _send_json(self, status: int, text: str, extra: dict[str, str] | None = None) -> None:
        self._send(status, text.encode("utf-8"), "application/json; charset=utf-8", extra)

    def do_GET(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)
        path = parsed.path
        if path in {"/", "/index.html"}:
            self._send(200, self.html_text.encode("utf-8"), "text/html; charset=utf-8")
            return

        if path == "/api/random-bands":
            raw = parse_qs(parsed.query).get("count", [None])[0]
            selection = self.dataset.sample(parse_count(raw))
            if not selection:
                self._send_json(404, dump_json({"error": "No performances found."}))
                return
            self._send_json(200, dump_json([p.to_dict() for p in selection]))
            return

        if path == "/api/all-bands":
            self._send_json(
                200,
                self.all_bands_text,
                {"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'},
            )
            return

        if path == "/health":
            self._send(200, b"ok", "text/plain; charset=utf-8")
            return

        self._send(404, b"not found", "text/plain; charset=utf-8")

    def do_HEAD(self) -> None:  # noqa: N802
        self.send_body = False
        self.do_GET()

    def do_OPTIONS(self) -> None:  # noqa: N802
        self._send(
            204,
            b"",
            "text/plain; charset=utf-8",
            {
                "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
                "Access-Control-Allow-Headers": "*",
            },
        )

    def log_message(self, format: str, *args: Any) -> None:
        if self.access_log:
            super().log_message(format, *args)


def build_server(
    dataset: Dataset,
    host: str = "0.0.0.0",
    port: int = 3000,
    access_log: bool = False,
) -> ThreadingHTTPServer:
    handler = type(
        "_DatasetHandler",
        (_Handler,),
        {
            "dataset": dataset,
            "all_bands_text": dump_json(dataset.to_records()),
            "html_text": _index_html(),
            "access_log": access_log,
        },
    )
    return ThreadingHTTPServer((host, port), handler)


def serve(dataset: Dataset, host: str = "0.0.0.0", port: int = 3000, access_log: bool = False) -> None:
    server = build_server(dataset, host=host, port=port, access_log=access_log)
    bound_host, bound_port = server.server_address[:2]
    base = f"http://{bound_host}:{bound_port}"
    print(f"Listening on {base}")
    print(f"UI available at:             {base}/")
    print(f"Download API available at:   {base}/api/all-bands")
    print(f"Randomizer API available at: {base}/api/random-bands?count=3 (max {MAX_COUNT})")
    print("Press Ctrl+C to stop")
    try:
        server.serve_forever()
    finally:
        server.server_close()
