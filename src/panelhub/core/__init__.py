"""Core CyberPanel integration: client, operations, user mirror and local store"""
