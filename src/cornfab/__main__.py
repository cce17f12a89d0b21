"""Console entry point; also lets the package run with ``python -m cornfab``."""

from .cli import app


def main() -> None:
    # Keep usage lines reading "cornfab" under python -m as well
    app(prog_name="cornfab")


if __name__ == "__main__":
    main()
