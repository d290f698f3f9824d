"""
Namespaced key-value cache facade.

This package provides a namespace layer over item-oriented cache pools:
logical keys are hashed together with a hierarchical namespace into storage
keys, so independent components can share one Django cache backend without
colliding.
"""
