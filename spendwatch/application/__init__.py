"""
Application layer: workflow orchestration.
"""
