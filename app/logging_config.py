from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Apply ``APP_LOG_LEVEL`` to the ``app`` logger tree.

    Handlers are left to the server (uvicorn) so records keep its format.
    ``app.idtoken`` logs certificate refreshes and rejected tokens;
    ``app.security`` logs rejected Authorization headers. At INFO a rejected
    token is logged once with its stage and error class, never the token
    itself. DEBUG adds why a signature was refused and the key count and
    lifetime of every certificate refresh.
    """

    root = logging.getLogger("app")
    root.setLevel(level.upper())
    root.propagate = True
