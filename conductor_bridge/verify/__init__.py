"""Version consistency checks for the bridge's README and generated commands."""

from .base import VerificationResult
from .compat import CompatConfig, CompatReport, extract_documented_sha, verify_compat
from .docs import DocsConfig, DocsReport, verify_docs, verify_readme, verify_templates

__all__ = [
    "CompatConfig",
    "CompatReport",
    "DocsConfig",
    "DocsReport",
    "VerificationResult",
    "extract_documented_sha",
    "verify_compat",
    "verify_docs",
    "verify_readme",
    "verify_templates",
]
