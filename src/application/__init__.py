"""Application Layer.

Entry points that wire infrastructure adapters to domain services.
"""
