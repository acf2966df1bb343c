"""Allow running the CLI with: python -m kanbo"""

from .cli.main import main

main()
