"""
Cadastral parcel reconciliation.

Joins a social housing parcel registry (legacy MAJIC codes) with a
cadastral geometry registry (CNIG PCI codes) and exports the result as
CSV and GeoJSON.
"""

__version__ = '0.1.0'
