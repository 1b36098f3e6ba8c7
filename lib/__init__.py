"""
lib/__init__.py

Configuration, logging, cost and stability utilities, plotting.
"""
