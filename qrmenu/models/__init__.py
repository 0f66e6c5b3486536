"""Pydantic models for the QR menu backend"""
