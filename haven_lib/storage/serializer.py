from typing import Any, Dict, Protocol
import json
import yaml


class Serializer(Protocol):
    """Serialize/deserialize Python values to the text the backends store.

    Implementations should be symmetric: `dump` -> str, `load` <- str.
    """

    extension: str

    def dump(self, value: Any) -> str: ...

    def load(self, data: str) -> Any: ...


class JSONSerializer:
    """Serializer using compact JSON. Caller must ensure values are JSON-serializable."""

    extension = "json"

    def dump(self, value: Any) -> str:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    def load(self, data: str) -> Any:
        return json.loads(data)


class YAMLSerializer:
    """Serializer using YAML (text). Caller must ensure values are YAML-serializable."""

    extension = "yaml"

    def dump(self, value: Any) -> str:
        return yaml.safe_dump(value, allow_unicode=True, sort_keys=False)

    def load(self, data: str) -> Any:
        return yaml.safe_load(data)


SERIALIZERS: Dict[str, type] = {
    "json": JSONSerializer,
    "yaml": YAMLSerializer,
    "yml": YAMLSerializer,
}


def get_serializer(name: str) -> Serializer:
    try:
        return SERIALIZERS[name.lower()]()
    except KeyError:
        raise ValueError(f"unknown serializer {name!r}; expected one of {sorted(SERIALIZERS)}")
