"""Flask application factory for the ptsim memory viewer.

The ``create_app`` function builds a simulator and a shell, and returns
a Flask app with these endpoints:

- ``GET /`` — render the memory map HTML page.
- ``POST /api/execute`` — run shell commands and return JSON.
- ``GET /api/memory`` — return the free-page bitmap and process list.
- ``GET /api/processes/<pid>/page-table`` — return one page table.
"""

from __future__ import annotations

from flask import Flask, Response, jsonify, render_template, request

from ptsim.config import MemoryConfig, SimulatorOptions
from ptsim.diagnostics import render_free_map
from ptsim.memory.directory import InvalidProcessError, NoSuchProcessError
from ptsim.shell import Shell
from ptsim.simulator import Simulator

_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404
_PAGES_PER_ROW = 16


def create_app(
    config: MemoryConfig | None = None,
    options: SimulatorOptions | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Memory geometry for the app's simulator.
        options: Runtime switches for the app's simulator.

    Returns:
        A configured Flask application ready to serve.

    """
    simulator = Simulator(config, options=options)
    shell = Shell(simulator=simulator)

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the memory map page."""
        bitmap = simulator.free_page_bitmap()
        return render_template(
            "index.html",
            bitmap=bitmap,
            per_row=_PAGES_PER_ROW,
            free_map=render_free_map(bitmap),
            free_pages=simulator.free_page_count,
            total_pages=simulator.config.page_count,
            processes=simulator.processes(),
        )

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run shell commands and return their output.

        Expects JSON body: ``{"command": "np 0 2 pfm"}``

        """
        data = request.get_json(silent=True)
        if data is None or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        command: str = data["command"]
        return jsonify({"output": shell.execute(command)})

    @app.route("/api/memory")
    def memory() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return allocation state for polling."""
        return jsonify(
            {
                "free_pages": simulator.free_page_count,
                "total_pages": simulator.config.page_count,
                "bitmap": list(simulator.free_page_bitmap()),
                "processes": simulator.processes(),
            }
        )

    @app.route("/api/processes/<int:pid>/page-table")
    def page_table(pid: int) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return the mapped entries of one process."""
        try:
            entries = simulator.page_table_entries(pid)
        except (InvalidProcessError, NoSuchProcessError) as e:
            return jsonify({"error": str(e)}), _HTTP_NOT_FOUND
        return jsonify({"pid": pid, "entries": [list(entry) for entry in entries]})

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``ptsim-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
