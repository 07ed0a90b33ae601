"""Infrastructure Layer.

File I/O for height maps. All functions here perform I/O and return
matrices consumed by domain services.
"""
