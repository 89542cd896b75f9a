"""
SharePoint Sandbox Solution Inventory
=====================================
Enumerates every site collection in a SharePoint Online tenant and reports the
sandbox solutions (WSP packages) found in each site's solution gallery.

WARNING: This tool operates in STRICT READ-ONLY mode.
         No write operations will be performed against the tenant.
"""

__version__ = "1.0.0"
__mode__ = "READ-ONLY"
