"""Global test fixtures."""

import os

# Keep a developer's config file and .env out of the tests
# This must happen at module load time, before any test module builds a Config
os.environ.pop("SOCIALAUTH_CONFIG_FILE", None)
os.environ.setdefault("SOCIALAUTH_SESSION__SECRET_KEY", "test-session-secret")
