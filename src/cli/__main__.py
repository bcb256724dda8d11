"""Allow ``python -m src.cli`` execution (delegates to the document CLI)."""

from src.cli.documents import main

main()
