"""Allow ``python -m google_workspace_server``."""

from google_workspace_server.cli.main import main

if __name__ == "__main__":
    main()
