from .sites import SiteEnumerator, is_excluded
from .solutions import SolutionScanner, is_public_site

__all__ = [
    "SiteEnumerator",
    "SolutionScanner",
    "is_excluded",
    "is_public_site",
]
