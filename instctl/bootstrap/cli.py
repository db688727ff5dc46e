import sys

from instctl.bootstrap.deps import get_cli
from instproxy.core.helpers.utils import scan


@scan("instctl.bootstrap.commands")
def main() -> int:
    cli = get_cli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
