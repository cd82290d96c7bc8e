"""HTTP API for normtree.

POST /normalize takes a JSON payload and a declarative schema document and
returns the entity bag, the result skeleton, and any merge conflicts.
"""

from .server import create_app  # noqa: F401
