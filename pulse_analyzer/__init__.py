"""
Pulse Analyzer - pulse detection, spectral comparison and noise reduction
for acoustic test captures.
"""

__version__ = "1.0.0"
