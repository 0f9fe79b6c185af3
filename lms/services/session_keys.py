# services/session_keys.py

def blacklisted_jti_key(jti: str) -> str:
    return f"blacklisted_tokens:{jti}"
