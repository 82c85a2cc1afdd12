from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from utils import boolish, split_list

# Keys recognized on the query string of /sbom. Body keys are taken as-is.
QUERY_PARAMS = (
    "type",
    "multiProject",
    "requiredOnly",
    "noBabel",
    "installDeps",
    "projectId",
    "projectName",
    "projectGroup",
    "projectVersion",
    "parentUUID",
    "serverUrl",
    "apiKey",
    "specVersion",
    "filter",
    "only",
    "autoCompositions",
    "git",
    "gitBranch",
    "active",
    "private",
    "owner",
    "repository",
    "token",
)


def _opt_str(v: Any) -> Optional[str]:
    if v is None or isinstance(v, bool):
        return None
    s = str(v).strip()
    return s or None


def _opt_flag(v: Any) -> Optional[bool]:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return boolish(v)


def merge_request_options(
    query: Mapping[str, Any],
    body: Optional[Mapping[str, Any]],
    defaults: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """
    Merge defaults, JSON body and query string into one raw option dict.

    Precedence (lowest first): defaults, every body key, each recognized
    query key with a non-empty value. ``type`` is renamed to ``projectType``.
    """
    options: dict[str, Any] = dict(defaults or {})
    if body:
        options.update(body)

    for param in QUERY_PARAMS:
        if query.get(param):
            options[param] = query[param]

    options["projectType"] = options.pop("type", options.get("projectType"))
    return options


def source_locator(query: Mapping[str, Any], body: Optional[Mapping[str, Any]]) -> Optional[str]:
    body = body or {}
    for raw in (query.get("path"), query.get("url"), body.get("path"), body.get("url")):
        s = _opt_str(raw)
        if s:
            return s
    return None


@dataclass(frozen=True)
class RequestOptions:
    """
    Immutable snapshot of one /sbom request's parameters.

    ``locator`` is the local path or public URL (``path``/``url``); private
    repositories are addressed by ``owner``/``repository``/``token`` instead.
    Credentials are kept out of ``repr`` so the object can be logged.
    """
    locator: Optional[str] = None

    # acquisition
    git: bool = False
    private: bool = False
    git_branch: Optional[str] = None
    owner: Optional[str] = None
    repository: Optional[str] = None
    token: Optional[str] = field(default=None, repr=False)

    # generation
    project_type: Optional[str] = None
    multi_project: Optional[bool] = None
    required_only: bool = False
    no_babel: Optional[bool] = None
    install_deps: Optional[bool] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    project_group: Optional[str] = None
    project_version: Optional[str] = None
    parent_uuid: Optional[str] = None
    spec_version: Optional[str] = None
    filter: tuple[str, ...] = ()
    only: tuple[str, ...] = ()
    auto_compositions: Optional[bool] = None
    active: Optional[bool] = None

    # publishing
    server_url: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any], locator: Optional[str] = None) -> "RequestOptions":
        return cls(
            locator=_opt_str(locator),
            git=boolish(options.get("git")),
            private=boolish(options.get("private")),
            git_branch=_opt_str(options.get("gitBranch")),
            owner=_opt_str(options.get("owner")),
            repository=_opt_str(options.get("repository")),
            token=_opt_str(options.get("token")),
            project_type=_opt_str(options.get("projectType")),
            multi_project=_opt_flag(options.get("multiProject")),
            required_only=boolish(options.get("requiredOnly")),
            no_babel=_opt_flag(options.get("noBabel")),
            install_deps=_opt_flag(options.get("installDeps")),
            project_id=_opt_str(options.get("projectId")),
            project_name=_opt_str(options.get("projectName")),
            project_group=_opt_str(options.get("projectGroup")),
            project_version=_opt_str(options.get("projectVersion")),
            parent_uuid=_opt_str(options.get("parentUUID")),
            spec_version=_opt_str(options.get("specVersion")),
            filter=split_list(options.get("filter")),
            only=split_list(options.get("only")),
            auto_compositions=_opt_flag(options.get("autoCompositions")),
            active=_opt_flag(options.get("active")),
            server_url=_opt_str(options.get("serverUrl")),
            api_key=_opt_str(options.get("apiKey")),
        )

    @classmethod
    def from_request(
        cls,
        query: Mapping[str, Any],
        body: Optional[Mapping[str, Any]],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "RequestOptions":
        merged = merge_request_options(query, body, defaults)
        return cls.from_mapping(merged, source_locator(query, body))

    @property
    def wants_post_processing(self) -> bool:
        return bool(self.required_only or self.filter or self.only)

    @property
    def wants_publishing(self) -> bool:
        return bool(self.server_url and self.api_key)

    @property
    def has_private_coordinates(self) -> bool:
        return bool(self.repository and self.owner and self.token)
