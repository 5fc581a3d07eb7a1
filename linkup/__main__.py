"""Allow ``python -m linkup``."""

from .cli import main

main()
