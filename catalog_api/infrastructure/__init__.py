"""Infrastructure layer.

Settings, logging setup and product persistence.
"""
