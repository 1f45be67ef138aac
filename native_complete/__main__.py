"""Allow `python -m native_complete`."""

from .command import main

main()
