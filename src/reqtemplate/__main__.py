"""Allow running as ``python -m reqtemplate``."""

from reqtemplate.cli import main

main()
