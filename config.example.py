# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "LOOSE_ENDS_APP_NAME": "App display name (default: Loose Ends).",
    "LOOSE_ENDS_LOG_LEVEL": "Console logging level (default: INFO).",
    # HTTP server
    "LOOSE_ENDS_HOST": "Bind address (default: 127.0.0.1).",
    "LOOSE_ENDS_PORT": "Bind port (default: $PORT or 8000).",
    # Paths (gitignored)
    "LOOSE_ENDS_DATA_DIR": "Local data directory for the DB and logs (default: .local/loose_ends).",
    "LOOSE_ENDS_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Session cookie
    "LOOSE_ENDS_SESSION_SECRET": "Cookie signing secret (random per process when unset).",
    "LOOSE_ENDS_SESSION_COOKIE": "Cookie name (default: __session).",
    "LOOSE_ENDS_SESSION_MAX_AGE": "Cookie lifetime in seconds (default: one year).",
    "LOOSE_ENDS_COOKIE_SECURE": "Send the cookie over HTTPS only (true/false, default false).",
    # GitHub OAuth
    "LOOSE_ENDS_GITHUB_CLIENT_ID": "OAuth app client id (required for sign-in).",
    "LOOSE_ENDS_GITHUB_CLIENT_SECRET": "OAuth app client secret (required for sign-in).",
    "LOOSE_ENDS_GITHUB_CALLBACK_URL": (
        "OAuth callback URL (default: http://<host>:<port>/auth/github/callback)."
    ),
    "LOOSE_ENDS_GITHUB_AUTHORIZE_URL": "Authorize endpoint (default: GitHub).",
    "LOOSE_ENDS_GITHUB_TOKEN_URL": "Token endpoint (default: GitHub).",
    "LOOSE_ENDS_GITHUB_API_URL": "API base URL for the profile lookup (default: https://api.github.com).",
    "LOOSE_ENDS_HTTP_TIMEOUT_SECONDS": "Timeout for OAuth HTTP calls (default: 10).",
    # Presentation defaults
    "LOOSE_ENDS_DEFAULT_TIMEZONE": "Time zone used until the browser reports one (default: UTC).",
    "LOOSE_ENDS_DEFAULT_LOCALE": "Locale for relative times when Accept-Language is absent (default: en).",
}
