"""Bundled pricing data for pricing-db.

This namespace exposes the packaged provider files (``<provider>_pricing.yaml``)
via importlib.resources. It is not intended for direct import by users.
"""
