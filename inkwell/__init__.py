"""Inkwell - blogging backend with a GraphQL API.

This package provides InkwellService, which serves:

- A GraphQL API for users and posts at /graphql
- JWT bearer authentication
- Image uploads at PUT /post-image, served back from /images
- MongoDB persistence through Beanie

Example:
    Launch the service:
    ```python
    from inkwell import InkwellService

    InkwellService.launch()
    ```

    Via command line:
    ```bash
    python -m inkwell
    ```
"""

from .auth_middleware import AuthMiddleware
from .config import InkwellSettings, get_inkwell_config
from .db import InkwellDB
from .errors import InkwellError
from .service import InkwellService
from .types import Post, User

__all__ = [
    "AuthMiddleware",
    "InkwellDB",
    "InkwellError",
    "InkwellService",
    "InkwellSettings",
    "Post",
    "User",
    "get_inkwell_config",
]
