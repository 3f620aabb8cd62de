"""Default records inserted by ``MissionControlManager.seed``.

Created: 2026-09-16
"""

SEED_PROJECT = {
    "name": "General",
    "description": "Default project",
    "color": "#3b82f6",
    "icon": "📌",
}


def _avatar(name: str) -> str:
    return f"https://api.dicebear.com/7.x/bottts/svg?seed={name}"


SEED_AGENTS = [
    {
        "name": "Motoko",
        "role": "Squad Lead",
        "level": "LEAD",
        "status": "active",
        "avatar": _avatar("Motoko"),
        "session_key": "agent:motoko:main",
        "models": {
            "thinking": "kimi-coding/kimi-for-coding",
            "heartbeat": "google/gemini-2.5-flash",
            "fallback": "kimi-coding/kimi-for-coding",
        },
    },
    {
        "name": "Forge",
        "role": "Developer",
        "level": "INT",
        "status": "idle",
        "avatar": _avatar("Forge"),
        "session_key": "agent:developer:main",
        "models": {
            "thinking": "openai-codex/gpt-5.2",
            "execution": "openai-codex/gpt-5.2",
            "heartbeat": "google/gemini-2.5-flash",
            "fallback": "kimi-coding/kimi-for-coding",
        },
    },
    {
        "name": "Quill",
        "role": "Writer",
        "level": "INT",
        "status": "idle",
        "avatar": _avatar("Quill"),
        "session_key": "agent:writer:main",
        "models": {
            "thinking": "google/gemini-2.5-pro",
            "heartbeat": "google/gemini-2.5-flash",
            "fallback": "kimi-coding/kimi-for-coding",
        },
    },
    {
        "name": "Recon",
        "role": "Researcher",
        "level": "SPC",
        "status": "idle",
        "avatar": _avatar("Recon"),
        "session_key": "agent:researcher:main",
        "models": {
            "thinking": "google/gemini-2.5-flash",
            "heartbeat": "google/gemini-2.5-flash",
            "fallback": "kimi-coding/kimi-for-coding",
        },
    },
    {
        "name": "Pulse",
        "role": "Monitor",
        "level": "SPC",
        "status": "idle",
        "avatar": _avatar("Pulse"),
        "session_key": "agent:monitor:main",
        "models": {
            "thinking": "google/gemini-2.5-flash",
            "heartbeat": "google/gemini-2.5-flash",
            "fallback": "kimi-coding/kimi-for-coding",
        },
    },
]
