import os
from pathlib import Path

CONFIG_ENV = "INSTPROXYCONFIG"
DEFAULT_CONFIG_NAME = "instproxy.yaml"


def get_configfile() -> Path:
    # Priority: ENV (set by --config on the command line) > default file in cwd
    raw = os.getenv(CONFIG_ENV)

    if raw is None:
        file = Path.cwd() / DEFAULT_CONFIG_NAME
    else:
        file = Path(raw).expanduser()

    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            f"  - Or set the {CONFIG_ENV} environment variable\n"
            f"  - Or place a '{DEFAULT_CONFIG_NAME}' file in the current working directory."
        )

    return file
