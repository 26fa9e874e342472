# =======================================================================================
# checkpoint/__init__.py - Package Initialization
# =======================================================================================
"""
Laptop Checkpoint - building entry/exit tracking for carried equipment

Records check-in/check-out events against a remote authoritative service and
keeps working from a local store whenever that service cannot be reached.
"""

__version__ = "1.0.0"
__author__ = "Laptop Checkpoint Team"
