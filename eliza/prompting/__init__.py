"""Prompting package.

This package contains deterministic prompt-construction helpers used by the
direct assistant client and the edge proxy functions. It does not perform
retrieval, network I/O, or model invocation.
"""
