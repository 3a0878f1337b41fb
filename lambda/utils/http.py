import os

import requests

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
USER_AGENT = os.getenv("HTTP_USER_AGENT", "LinguaVault/1.0 (language practice service)")

# Shared across invocations of a warm Lambda container
session = requests.Session()
session.headers.update({"User-Agent": USER_AGENT})
