"""Allow ``python -m mass_import.cli`` execution."""

from mass_import.cli.run_import import main

main()
