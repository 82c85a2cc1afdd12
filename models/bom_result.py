from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class BomResult:
    """
    The document produced by the generator for one request.

    ``bom_json`` is either the parsed CycloneDX document, its raw text, or
    None when the generator produced nothing.
    """
    bom_json: Optional[Any] = None

    @classmethod
    def empty(cls) -> "BomResult":
        return cls(bom_json=None)

    @property
    def is_empty(self) -> bool:
        return self.bom_json is None or self.bom_json == ""

    def to_text(self) -> str:
        if self.is_empty:
            return "{}"
        if isinstance(self.bom_json, str):
            return self.bom_json
        return json.dumps(self.bom_json, indent=2, ensure_ascii=False)
