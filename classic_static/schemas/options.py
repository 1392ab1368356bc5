"""Static handler options, validated once per middleware instance."""

from __future__ import annotations

import logging
import os
import re
import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Protocol, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    InstanceOf,
    StrictBool,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = logging.getLogger(__name__)

CallNext = Callable[[], Awaitable[None]]


class StaticConfigError(ValueError):
    """Raised when the handler is constructed with invalid options."""


@dataclass(frozen=True)
class ExactMatcher:
    """Index rule matching one file name exactly (case-sensitive)."""
    name: str


@dataclass(frozen=True)
class PatternMatcher:
    """Index rule matching any file name the regex finds a match in."""
    pattern: re.Pattern[str]


Matcher = Union[ExactMatcher, PatternMatcher]

# Old option name -> current name
RENAMED_OPTIONS = {
    "enable_caching": "browser_cache_enabled",
    "cache_max_age": "browser_cache_max_age",
}


class ContentProducer(Protocol):
    """Renders a file the static handler does not serve itself."""

    async def render(
        self, request: Request, call_next: CallNext, path: str
    ) -> Optional[Response]: ...


def matches(matcher: Matcher, name: str) -> bool:
    match matcher:
        case ExactMatcher(name=expected):
            return name == expected
        case PatternMatcher(pattern=regex):
            return regex.search(name) is not None
    return False


def normalize_index(value: Any) -> tuple[Matcher, ...]:
    """Turn the ``index`` option into an ordered tuple of matchers.

    A bare string is the legacy single-name form: it still works, but a
    deprecation notice is emitted. Elements that are neither strings nor
    compiled patterns are dropped.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        if not value:
            return ()
        message = (
            f"index={value!r} as a plain string is deprecated, "
            f"pass a list instead: index=[{value!r}]"
        )
        warnings.warn(message, DeprecationWarning, stacklevel=2)
        logger.warning("DEPRECATION WARNING: %s", message)
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("index must be a string or a list of names/patterns")

    result: list[Matcher] = []
    for item in value:
        if isinstance(item, (ExactMatcher, PatternMatcher)):
            result.append(item)
        elif isinstance(item, str):
            if item:
                result.append(ExactMatcher(item))
        elif isinstance(item, re.Pattern):
            result.append(PatternMatcher(item))
        else:
            logger.debug("Ignoring index entry of type %s", type(item).__name__)
    return tuple(result)


class TemplateConfig(BaseModel):
    """File extensions routed to an external renderer.

    ``render`` is called as ``render(request, call_next, path)``. It may
    return a Starlette ``Response`` or ``None`` when it produced the
    response itself (for example by awaiting ``call_next``). Objects with a
    ``render`` method (see ``ContentProducer``) are accepted as well.
    """

    model_config = ConfigDict(frozen=True)

    ext: frozenset[str] = frozenset()
    render: Optional[Callable[..., Any]] = None

    @field_validator("ext", mode="before")
    @classmethod
    def _coerce_ext(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(e.lstrip(".") if isinstance(e, str) else e for e in value)
        return value

    @field_validator("render", mode="before")
    @classmethod
    def _unwrap_producer(cls, value: Any) -> Any:
        if value is not None and not callable(value):
            bound = getattr(value, "render", None)
            if callable(bound):
                return bound
        return value

    @property
    def enabled(self) -> bool:
        return bool(self.ext) and self.render is not None


class StaticConfig(BaseModel):
    """Immutable handler configuration; see ``StaticConfig.build``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: str
    method: frozenset[str] = frozenset({"GET"})
    show_dir_contents: StrictBool = True
    index: tuple[Union[InstanceOf[ExactMatcher], InstanceOf[PatternMatcher]], ...] = ()
    url_prefix: str = ""
    urls_reserved: frozenset[str] = frozenset()
    template: Optional[TemplateConfig] = None
    browser_cache_enabled: StrictBool = True
    browser_cache_max_age: StrictInt = Field(default=3600, ge=0)
    use_original_url: StrictBool = True

    @model_validator(mode="before")
    @classmethod
    def _migrate_renamed(cls, data: Any) -> Any:
        """Accept renamed options under their old name, with a deprecation notice.

        When both names are given the current one wins.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for old, new in RENAMED_OPTIONS.items():
            if old not in data:
                continue
            value = data.pop(old)
            message = f"option {old!r} is deprecated, use {new!r} instead"
            warnings.warn(message, DeprecationWarning, stacklevel=2)
            logger.warning("DEPRECATION WARNING: %s", message)
            data.setdefault(new, value)
        return data

    @classmethod
    def build(cls, root: str | os.PathLike[str] | None, **options: Any) -> StaticConfig:
        """Validate options and return the config, or raise StaticConfigError."""
        try:
            return cls(root=root, **options)
        except ValidationError as exc:
            raise StaticConfigError(str(exc)) from exc

    @field_validator("root", mode="before")
    @classmethod
    def _check_root(cls, value: Any) -> str:
        if isinstance(value, os.PathLike):
            value = os.fspath(value)
        if not isinstance(value, str) or not value:
            raise ValueError("root must be a non-empty path")
        if not os.path.isabs(value):
            raise ValueError(f"root must be an absolute path, got {value!r}")
        return os.path.normpath(value)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_methods(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("method must be a list of HTTP method names")
        return frozenset(m.upper() if isinstance(m, str) else m for m in value)

    @field_validator("index", mode="before")
    @classmethod
    def _normalize_index(cls, value: Any) -> tuple[Matcher, ...]:
        return normalize_index(value)

    @field_validator("url_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: Any) -> Any:
        if value is None:
            return ""
        if not isinstance(value, str):
            return value
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @field_validator("urls_reserved", mode="before")
    @classmethod
    def _normalize_reserved(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("urls_reserved must be a list of top-level paths")
        reserved = set()
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"urls_reserved entries must be strings, got {item!r}")
            segment = item.strip("/")
            if segment:
                reserved.add("/" + segment)
        return frozenset(reserved)

    @property
    def reserved_segments(self) -> frozenset[str]:
        """Reserved entries without their leading slash."""
        return frozenset(r[1:] for r in self.urls_reserved)
