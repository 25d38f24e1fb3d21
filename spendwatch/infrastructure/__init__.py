"""
Infrastructure components: detectors, data access, transformers and notifiers.
"""
