# config_local.example.py

"""
Machine-local overrides for loose_ends.config.

Copy to `config_local.py` (gitignored) next to where the server is started.
Only the names below are read; secrets belong in `.env`.
"""

# Zone used for "today" until a signed-in browser posts its own zone
# DEFAULT_TIMEZONE = "Europe/Berlin"

# Serving behind HTTPS: only send the session cookie over TLS
# COOKIE_SECURE = True
