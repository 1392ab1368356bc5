"""classic-static: static files, index documents and directory listings for ASGI apps."""

__version__ = "1.3.0"

from classic_static.middleware import StaticFilesMiddleware  # noqa: E402
from classic_static.schemas.options import (  # noqa: E402
    ContentProducer,
    ExactMatcher,
    PatternMatcher,
    StaticConfig,
    StaticConfigError,
    TemplateConfig,
)

__all__ = [
    "ContentProducer",
    "ExactMatcher",
    "PatternMatcher",
    "StaticConfig",
    "StaticConfigError",
    "StaticFilesMiddleware",
    "TemplateConfig",
    "__version__",
]
