"""Allow running snapkeep as ``python -m snapkeep``."""

from snapkeep import main

main()
