"""Allow ``python -m nextwipe.cli`` execution."""

from nextwipe.cli.wipes import main

main()
