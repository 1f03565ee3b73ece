"""Catalog dashboard client.

Consumes the catalog API and keeps a local snapshot of the catalog:
- Full resync after every confirmed write
- Case-insensitive search over name and description
- On-demand analytics (count, average price)
- Strictly sequential bulk deletion
"""

__version__ = "0.1.0"
