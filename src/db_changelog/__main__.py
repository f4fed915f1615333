"""Allow ``python -m db_changelog``."""

from db_changelog.cli.main import main

if __name__ == "__main__":
    main()
