"""
Utility helpers: console / logging setup and source file discovery.
"""
