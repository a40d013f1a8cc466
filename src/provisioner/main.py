"""Console entrypoint."""

from __future__ import annotations

from provisioner.cli.app import app


def main() -> None:
    app(prog_name="ocp-provisioner")


if __name__ == "__main__":
    main()
