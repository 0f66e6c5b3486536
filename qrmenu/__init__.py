"""Çardaklı Köşk QR menu backend"""

__version__ = "1.0.0"
