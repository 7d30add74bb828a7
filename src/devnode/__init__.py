"""devnode: local development chain servers that can run detached.

Most users interact with devnode through the ``devnode`` CLI. The detached
instance lifecycle is also importable from ``devnode.instances``.
"""

__version__ = "0.1.0"
