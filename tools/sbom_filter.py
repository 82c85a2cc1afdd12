from __future__ import annotations

import copy
import json
from typing import Any, Iterable, Optional

from models.bom_result import BomResult
from models.request_options import RequestOptions


# --- CycloneDX JSON helpers ---

def _safe_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, str):
        s = v.strip()
        return s if s else None
    return str(v).strip() or None


def _bom_ref(c: dict[str, Any]) -> Optional[str]:
    # CycloneDX JSON commonly uses "bom-ref"; be tolerant of "bomRef"
    return _safe_str(c.get("bom-ref")) or _safe_str(c.get("bomRef"))


def _matches_any(purl: Optional[str], needles: Iterable[str]) -> bool:
    return bool(purl) and any(n in purl for n in needles)


def keep_component(component: dict[str, Any], options: RequestOptions) -> bool:
    scope = (_safe_str(component.get("scope")) or "").lower()
    purl = _safe_str(component.get("purl"))

    if options.required_only and scope in ("optional", "excluded"):
        return False
    if options.only and not _matches_any(purl, options.only):
        return False
    if options.filter and _matches_any(purl, options.filter):
        return False
    return True


def _filter_components(components: list[Any], options: RequestOptions, removed: set[str]) -> tuple[list[Any], int]:
    kept: list[Any] = []
    dropped = 0
    for c in components:
        if not isinstance(c, dict):
            kept.append(c)
            continue
        if not keep_component(c, options):
            dropped += 1
            ref = _bom_ref(c)
            if ref:
                removed.add(ref)
            continue
        nested = c.get("components")
        if isinstance(nested, list):
            c["components"], nested_dropped = _filter_components(nested, options, removed)
            dropped += nested_dropped
        kept.append(c)
    return kept, dropped


def _prune_dependencies(dependencies: list[Any], removed: set[str]) -> list[Any]:
    pruned: list[Any] = []
    for dep in dependencies:
        if not isinstance(dep, dict):
            continue
        if dep.get("ref") in removed:
            continue
        depends_on = dep.get("dependsOn")
        if isinstance(depends_on, list):
            dep["dependsOn"] = [r for r in depends_on if r not in removed]
        pruned.append(dep)
    return pruned


def filter_bom(bom: dict[str, Any], options: RequestOptions) -> dict[str, Any]:
    """
    Apply requiredOnly / only / filter to a CycloneDX JSON document.

    Returns a filtered copy; the input is not modified.
    """
    out = copy.deepcopy(bom)
    removed: set[str] = set()
    dropped = 0

    components = out.get("components")
    if isinstance(components, list):
        out["components"], dropped = _filter_components(components, options, removed)

    dependencies = out.get("dependencies")
    if isinstance(dependencies, list) and removed:
        out["dependencies"] = _prune_dependencies(dependencies, removed)

    # Whatever completeness the generator claimed no longer holds
    if dropped and isinstance(out.get("compositions"), list):
        for comp in out["compositions"]:
            if isinstance(comp, dict):
                comp["aggregate"] = "incomplete"

    return out


def post_process(bom: BomResult, options: RequestOptions) -> BomResult:
    if bom.is_empty:
        return bom

    document = bom.bom_json
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except json.JSONDecodeError:
            return bom

    if not isinstance(document, dict):
        return bom
    return BomResult(bom_json=filter_bom(document, options))
