"""Service modules for the QR menu backend"""
