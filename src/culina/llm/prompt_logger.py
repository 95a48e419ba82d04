"""
Culina - Prompt Logger.

Logs completion prompts and raw responses to files for debugging model
output problems. Enabled via CULINA_LOG_PROMPTS=1 or --log-prompts.
"""

import os
from datetime import datetime
from pathlib import Path

# Configuration
LOG_PROMPTS = os.getenv("CULINA_LOG_PROMPTS", "0") == "1"
LOG_DIR = Path("prompt_logs")

# Session tracking
_session_id: str | None = None
_call_counter: int = 0


def enable_prompt_logging(enabled: bool = True) -> None:
    """Enable or disable prompt logging."""
    global LOG_PROMPTS
    LOG_PROMPTS = enabled
    if enabled:
        _ensure_log_dir()


def _ensure_log_dir() -> None:
    """Create the log directory if it doesn't exist."""
    LOG_DIR.mkdir(exist_ok=True)


def _get_session_id() -> str:
    """Get or create a session ID for this run."""
    global _session_id
    if _session_id is None:
        _session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    return _session_id


def _get_session_dir() -> Path:
    """Get the directory for this session's logs."""
    session_dir = LOG_DIR / _get_session_id()
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def log_prompt(
    *,
    name: str,
    model: str,
    system_prompt: str,
    user_prompt: str,
    response_text: str | None = None,
    error: str | None = None,
) -> Path | None:
    """
    Log a prompt and the raw completion text to a file.

    Args:
        name: Which call this was (e.g. generate_recipe)
        model: Model identifier sent to the gateway
        system_prompt: The system prompt
        user_prompt: The user's request
        response_text: Raw completion text, before any parsing
        error: Any error that occurred

    Returns:
        Path to the log file, or None if logging is disabled
    """
    if not LOG_PROMPTS:
        return None

    global _call_counter
    _call_counter += 1

    _ensure_log_dir()
    filepath = _get_session_dir() / f"{_call_counter:02d}_{name}.md"

    content = f"""# Completion: {name}

**Time:** {datetime.now().isoformat()}
**Model:** {model}

---

## System Prompt

```
{system_prompt}
```

---

## User Prompt

```
{user_prompt}
```

---

## Response

"""

    if error:
        content += f"**ERROR:** {error}\n"
    elif response_text is not None:
        content += f"````\n{response_text}\n````\n"
    else:
        content += "(No response)\n"

    filepath.write_text(content, encoding="utf-8")

    return filepath


def get_session_log_dir() -> Path | None:
    """Get the current session's log directory, if logging is enabled."""
    if not LOG_PROMPTS:
        return None
    return _get_session_dir()


def reset_session() -> None:
    """Reset the session (for testing)."""
    global _session_id, _call_counter
    _session_id = None
    _call_counter = 0
