"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

APP_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Vibes App</title>
  <script type="importmap">
  {
    "imports": {
      "react": "https://esm.sh/react@18.2.0",
      "react-dom": "https://esm.sh/react-dom@18.2.0",
      "react-dom/client": "https://esm.sh/react-dom@18.2.0/client",
      "use-vibes": "https://esm.sh/use-vibes@0.18.9?external=react,react-dom",
      "call-ai": "https://esm.sh/call-ai@0.19.0?external=react,react-dom",
      "use-fireproof": "https://esm.sh/use-fireproof@0.20.0?external=react,react-dom"
    }
  }
  </script>
  <script src="https://unpkg.com/@babel/standalone/babel.min.js"></script>
</head>
<body>
  <div id="container"></div>
  <script type="text/babel" data-type="module">
    import React from "react";
    import ReactDOM from "react-dom/client";

    export default function App() {
      return <div className="app">Hello</div>;
    }

    ReactDOM.createRoot(document.getElementById("container")).render(<App />);
  </script>
</body>
</html>
"""

TARGET_IMPORTS = {
    "react": "https://esm.sh/react@18.3.1",
    "react-dom": "https://esm.sh/react-dom@18.3.1",
    "react-dom/client": "https://esm.sh/react-dom@18.3.1/client",
    "use-vibes": "https://esm.sh/use-vibes@0.19.0?external=react,react-dom",
    "call-ai": "https://esm.sh/call-ai@0.19.0?external=react,react-dom",
    "use-fireproof": "https://esm.sh/use-fireproof@0.20.0?external=react,react-dom",
}

VIBES_SWITCH_V1 = """\
function VibesSwitch({ isOn, onToggle }) {
  const style = { width: 40 };
  return <button style={style} onClick={onToggle}>{isOn ? "on" : "off"}</button>;
}"""

VIBES_SWITCH_V2 = """\
function VibesSwitch({ isOn, onToggle }) {
  const isMobile = useMobile();
  return <button className={isMobile ? "sm" : "lg"} onClick={onToggle}>{isOn ? "on" : "off"}</button>;
}"""


def _write_cache(path: Path, imports: dict | None = None, **extra) -> Path:
    """Write an import map cache file in the sync step's format."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "lastUpdated": "2026-01-10T12:00:00Z",
        "source": "https://vibes.diy/import-map",
        "imports": TARGET_IMPORTS if imports is None else imports,
    }
    data.update(extra)
    path.write_text(json.dumps(data, indent=2))
    return path


@pytest.fixture
def write_cache():
    return _write_cache


@pytest.fixture
def target_imports() -> dict:
    return dict(TARGET_IMPORTS)


@pytest.fixture
def vibes_switch_v1() -> str:
    return VIBES_SWITCH_V1


@pytest.fixture
def vibes_switch_v2() -> str:
    return VIBES_SWITCH_V2


@pytest.fixture
def app_html() -> str:
    return APP_HTML


@pytest.fixture
def app_file(tmp_path: Path) -> Path:
    """A Vibes app with outdated React and use-vibes pins."""
    project = tmp_path / "project"
    project.mkdir()
    app = project / "app.html"
    app.write_text(APP_HTML, encoding="utf-8")
    return app


@pytest.fixture
def plugin_root(tmp_path: Path) -> Path:
    """Plugin directory whose working cache holds the target import map."""
    root = tmp_path / "plugin"
    _write_cache(root / "cache" / "import-map.json")
    return root
