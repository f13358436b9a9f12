# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep the API key in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKFLOW_APP_NAME": "App display name (default: taskflow).",
    "TASKFLOW_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKFLOW_DATA_DIR": "Local data directory (default: .local/taskflow).",
    "TASKFLOW_TASKS_PATH": "Task storage JSON file (default: <data_dir>/tasks.json).",
    "TASKFLOW_BACKUP_DIR": "Default /export directory (default: <data_dir>/backups).",
    # LLM / OpenRouter
    "TASKFLOW_OPENROUTER_API_KEY": "OpenRouter API key (without it the offline client is used).",
    "TASKFLOW_OPENROUTER_BASE_URL": "OpenRouter base URL (default: https://openrouter.ai/api/v1).",
    "TASKFLOW_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "TASKFLOW_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "TASKFLOW_APP_TITLE": "Optional OpenRouter metadata header title.",
    "TASKFLOW_OFFLINE": "Force the offline LLM client (true/false).",
    # LLM timeouts
    "TASKFLOW_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "TASKFLOW_LLM_READ_TIMEOUT_SECONDS": "Read timeout, never below the first-token timeout (default: 25).",
    "TASKFLOW_LLM_FIRST_TOKEN_TIMEOUT_SECONDS": "Give up on a model without a first token (default: 20).",
}
