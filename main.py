"""Model factory scorecard entrypoint."""

from __future__ import annotations

from scorecard.cli import main_cli


def main() -> None:
    main_cli(prog_name="scorecard")


if __name__ == "__main__":
    main()
