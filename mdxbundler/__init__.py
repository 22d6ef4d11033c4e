"""Bundle MDX documents and their imports into a single self-contained script."""

from __future__ import annotations

from .bundler import bundle_mdx, bundle_mdx_sync
from .errors import BundleError, ConfigurationError
from .frontmatter import FrontMatterError, MatterOptions, MatterResult, split_front_matter
from .markup import MarkupError, MarkupOptions, remark_mdx_images
from .models import BundleResult, SourceDocument

__version__ = "0.1.0"

__all__ = [
    "BundleError",
    "BundleResult",
    "ConfigurationError",
    "FrontMatterError",
    "MarkupError",
    "MarkupOptions",
    "MatterOptions",
    "MatterResult",
    "SourceDocument",
    "__version__",
    "bundle_mdx",
    "bundle_mdx_sync",
    "remark_mdx_images",
    "split_front_matter",
]
