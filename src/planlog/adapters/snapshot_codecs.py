import io
import json
from typing import Any

import yaml

from ..core.errors import InvalidSnapshot
from ..core.ports import SnapshotCodec


class JsonCodec(SnapshotCodec):
    suffix = ".json"

    def decode(self, text: str) -> dict[str, Any]:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidSnapshot(f"bad JSON snapshot: {e}") from e

    def encode(self, data: dict[str, Any]) -> str:
        return json.dumps(data, ensure_ascii=False, indent=2)


class YamlCodec(SnapshotCodec):
    suffix = ".yaml"

    def decode(self, text: str) -> dict[str, Any]:
        try:
            return yaml.safe_load(io.StringIO(text))
        except yaml.YAMLError as e:
            raise InvalidSnapshot(f"bad YAML snapshot: {e}") from e

    def encode(self, data: dict[str, Any]) -> str:
        buf = io.StringIO()
        yaml.safe_dump(data, buf, sort_keys=False, allow_unicode=True)
        return buf.getvalue()


def codec_for(fmt: str | None, path=None) -> SnapshotCodec:
    """Pick a codec by explicit format name, else by file suffix."""
    if not fmt and path is not None:
        fmt = "yaml" if str(path).endswith((".yaml", ".yml")) else "json"
    if fmt in ("yaml", "yml"):
        return YamlCodec()
    if fmt in (None, "", "json"):
        return JsonCodec()
    raise ValueError(f"Unknown snapshot format: {fmt}")
