"""API server components"""
