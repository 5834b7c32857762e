import sys

from benchcore.exceptions import ConfigError


def run() -> int:
    # CONFIG is validated when benchcore.config is first imported
    try:
        from benchcore.cli import main
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    return main()


if __name__ == "__main__":
    sys.exit(run())
