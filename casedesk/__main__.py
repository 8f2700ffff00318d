"""Module and console entrypoint.

- Development: python -m casedesk
- Installed:   casedesk
"""

from casedesk.cli import main


def __main__() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    __main__()
