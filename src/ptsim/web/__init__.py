"""Browser-based memory viewer for ptsim.

This package provides a Flask application that drives a simulator
through the shell and shows its memory map.  It is an **optional**
extra — install with::

    pip install ptsim[web]

The ``create_app`` factory in ``app.py`` builds one simulator per app
and serves:

- ``GET /`` — HTML page with the free-page map.
- ``POST /api/execute`` — run shell commands and return JSON.
- ``GET /api/memory`` — bitmap and process list as JSON.
- ``GET /api/processes/<pid>/page-table`` — one process's mappings.
"""
