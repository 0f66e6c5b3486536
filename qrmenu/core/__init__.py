"""Core modules for the QR menu backend"""
