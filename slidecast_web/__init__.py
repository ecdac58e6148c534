"""
SlideCast Web - loopback presenter server
"""

from slidecast_core.version import __version__
