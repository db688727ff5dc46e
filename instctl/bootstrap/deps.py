from functools import lru_cache

from instctl.core.ctl import InstCtl
from instctl.infra.format_renderer import JsonRenderer, YamlRenderer
from instproxy.bootstrap.deps import get_config, open_client


@lru_cache
def get_cli() -> InstCtl:
    renderers = {
        "yaml": YamlRenderer(),
        "json": JsonRenderer(),
    }
    return InstCtl(
        renderers=renderers,
        config_factory=get_config,
        client_factory=open_client,
    )
