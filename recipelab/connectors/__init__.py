"""
Recipe catalog connectors.

This package contains:
- base: Connector contract and tagged catalog result variants
- spoonacular_connector: Spoonacular complexSearch / information client
"""
