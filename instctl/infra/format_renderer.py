import json
from typing import Any

import yaml

from instctl.core.ports.render import Renderer


class JsonRenderer(Renderer):
    def render(self, data: Any) -> str:
        return json.dumps(data, indent=2, sort_keys=False, default=str)


class YamlRenderer(Renderer):
    def render(self, data: Any) -> str:
        return yaml.safe_dump(self._normalize(data), sort_keys=False)

    def _normalize(self, obj):
        if isinstance(obj, dict):
            return {str(k): self._normalize(v) for k, v in obj.items()}

        if isinstance(obj, (list, tuple)):
            return [self._normalize(x) for x in obj]

        return obj
