"""
Run the API with uvicorn: python -m siteadmin

HOST and PORT come from the environment (defaults 0.0.0.0:5000). uvicorn's
own proxy header rewriting stays off: the app reads X-Forwarded-For and
X-Forwarded-Proto itself, honouring TRUST_PROXY and PROXY_HOPS.
"""

import uvicorn

from siteadmin.config import Settings
from siteadmin.main import create_app


def main() -> None:
    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        proxy_headers=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
