"""CLI tools for the mass-import pipeline.

- ``python -m mass_import.cli.run_import`` - import a JSON export into the
  SQLite catalog with duplicate detection.
- ``python -m mass_import.cli`` - same as ``run_import``.
"""
