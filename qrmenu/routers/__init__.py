"""API routers for the QR menu backend"""
