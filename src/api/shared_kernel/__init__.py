"""Shared Kernel module.

Pieces every bounded context agrees on: the caller's claims identity, the
request-scoped tenant context and the observation context passed to
domain probes. Nothing here imports a bounded context.
"""
