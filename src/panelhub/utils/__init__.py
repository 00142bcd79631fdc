"""Utility modules for configuration and logging"""
