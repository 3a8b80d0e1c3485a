"""
Regression backends.

Available backends:
    CPUQRBackend: CPU implementation using QR decomposition
"""

from pycausalsim.regression.backends.cpu import CPUQRBackend

__all__ = [
    "CPUQRBackend",
]
