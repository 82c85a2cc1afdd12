"""Tests for requiredOnly / only / filter post-processing."""

import copy
import json

from conftest import SAMPLE_BOM
from models.bom_result import BomResult
from models.request_options import RequestOptions
from tools.sbom_filter import filter_bom, post_process


def _names(bom):
    return [c["name"] for c in bom["components"]]


def test_required_only_drops_optional_and_prunes_dependencies():
    out = filter_bom(SAMPLE_BOM, RequestOptions(required_only=True))

    assert _names(out) == ["left-pad", "requests"]
    assert [d["ref"] for d in out["dependencies"]] == ["pkg:npm/left-pad@1.3.0", "pkg:pypi/requests@2.31.0"]
    assert out["dependencies"][0]["dependsOn"] == []
    assert out["compositions"] == [{"aggregate": "incomplete"}]


def test_only_keeps_matching_purls():
    out = filter_bom(SAMPLE_BOM, RequestOptions(only=("pkg:npm",)))
    assert _names(out) == ["left-pad", "jest"]


def test_filter_drops_matching_purls():
    out = filter_bom(SAMPLE_BOM, RequestOptions(filter=("pypi",)))
    assert _names(out) == ["left-pad", "jest"]


def test_nested_components_are_filtered():
    bom = {
        "components": [
            {"name": "app", "purl": "pkg:maven/org.acme/app@1", "components": [
                {"name": "junit", "purl": "pkg:maven/junit/junit@4", "bom-ref": "junit"},
                {"name": "guava", "purl": "pkg:maven/com.google/guava@33", "bom-ref": "guava"},
            ]},
        ],
    }
    out = filter_bom(bom, RequestOptions(filter=("junit",)))

    assert [c["name"] for c in out["components"][0]["components"]] == ["guava"]


def test_input_is_not_modified():
    original = copy.deepcopy(SAMPLE_BOM)
    filter_bom(SAMPLE_BOM, RequestOptions(required_only=True, filter=("pypi",)))
    assert SAMPLE_BOM == original


def test_nothing_removed_keeps_compositions():
    out = filter_bom(SAMPLE_BOM, RequestOptions(filter=("pkg:golang",)))

    assert len(out["components"]) == 3
    assert out["compositions"] == [{"aggregate": "complete"}]


def test_post_process_parses_text():
    result = post_process(BomResult(bom_json=json.dumps(SAMPLE_BOM)), RequestOptions(required_only=True))

    assert isinstance(result.bom_json, dict)
    assert _names(result.bom_json) == ["left-pad", "requests"]


def test_post_process_leaves_empty_and_unparseable_alone():
    empty = BomResult.empty()
    garbage = BomResult(bom_json="<bom/>")

    assert post_process(empty, RequestOptions(required_only=True)) is empty
    assert post_process(garbage, RequestOptions(required_only=True)) is garbage
