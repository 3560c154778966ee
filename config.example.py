# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Keep them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "POMOFOCUS_APP_NAME": "App display name (default: pomofocus).",
    "POMOFOCUS_LOG_LEVEL": "Console logging level (default: INFO).",
    # LLM / OpenAI-compatible API
    "POMOFOCUS_OPENAI_API_KEY": "API key (falls back to OPENAI_API_KEY; empty => offline demo client).",
    "POMOFOCUS_OPENAI_BASE_URL": "Optional base URL (falls back to OPENAI_BASE_URL).",
    "POMOFOCUS_CHAT_MODEL": "Chat model (default: gpt-3.5-turbo).",
    "POMOFOCUS_ENHANCE_MODEL": "Enhancement model (default: the chat model).",
    "POMOFOCUS_CHAT_TEMPERATURE": "Chat sampling temperature (default: 0.7).",
    "POMOFOCUS_ENHANCE_TEMPERATURE": "Enhancement sampling temperature (default: 0.3).",
    "POMOFOCUS_LLM_MAX_TOKENS": "Completion token cap for both services (default: 500).",
    "POMOFOCUS_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "POMOFOCUS_LLM_READ_TIMEOUT_SECONDS": "Read timeout (default: 60).",
    "POMOFOCUS_CHAT_HISTORY_TURNS": "Prior turns sent with a chat message (default: 5).",
    # Agent endpoint
    "POMOFOCUS_AGENT_TOKEN": (
        "Shared secret expected in X-Agent-Token (falls back to AGENT_TOKEN; empty => open)."
    ),
    # HTTP server
    "POMOFOCUS_HOST": "Bind address for pomofocus-server (default: 127.0.0.1).",
    "POMOFOCUS_PORT": "Port for pomofocus-server (default: 8000).",
    # Paths (gitignored)
    "POMOFOCUS_DATA_DIR": "Local data directory (default: .local/pomofocus).",
    "POMOFOCUS_DB_PATH": "SQLite path for users and tasks (default: <data_dir>/pomofocus.sqlite3).",
    "POMOFOCUS_IDENTITY_PATH": "Cached console sign-in (default: <data_dir>/identity.json).",
}
