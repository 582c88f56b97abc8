"""
Pipelines Dashboard
Blueprint registry.
"""
