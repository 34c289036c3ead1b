"""Upstream feed endpoints.

Internal to pyseta; callers go through :class:`pyseta.client.SetaClient`.
"""
