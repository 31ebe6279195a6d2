import os

from .types import ClientOptions

DEFAULT_PREFIX = "REBOUND_"


def _parse_env_file(env_path: str) -> dict[str, str]:
    """Parse a simple .env file into a dict without modifying os.environ.

    Supports basic KEY=VALUE pairs, ignoring comments and blank lines.
    Surrounding single/double quotes are stripped if present.
    """
    values: dict[str, str] = {}
    try:
        with open(env_path) as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip().strip('"').strip("'")
                if key:
                    values[key] = val
    except FileNotFoundError:
        # A missing file just means "environment only"
        pass
    return values


def _env_map(env_path: str | None) -> dict[str, str]:
    # actual environment takes precedence over the .env file
    file_env = _parse_env_file(env_path) if env_path else {}
    return {**file_env, **os.environ}


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def load_base_url_from_env(prefix: str = DEFAULT_PREFIX, env_path: str | None = None) -> str | None:
    return _env_map(env_path).get(f"{prefix}BASE_URL") or None


def load_client_options_from_env(
    prefix: str = DEFAULT_PREFIX, env_path: str | None = None
) -> ClientOptions:
    """Create ClientOptions from environment variables.

    - ``<prefix>TIMEOUT``: request timeout in seconds (float)
    - ``<prefix>MAX_RETRIES``: retry budget; negative or unset means unlimited
    - ``<prefix>HEADER_<NAME>``: default request header; underscores in NAME become
        dashes, so ``REBOUND_HEADER_X_API_KEY`` sets ``X-Api-Key``
    - If 'env_path' is provided, variables from the .env file are used as a fallback
        for anything missing from the process environment.
    """
    env_map = _env_map(env_path)

    timeout = None
    raw_timeout = env_map.get(f"{prefix}TIMEOUT")
    if raw_timeout:
        timeout = _parse_float(f"{prefix}TIMEOUT", raw_timeout)

    max_retries = None
    raw_retries = env_map.get(f"{prefix}MAX_RETRIES")
    if raw_retries:
        max_retries = _parse_int(f"{prefix}MAX_RETRIES", raw_retries)

    header_prefix = f"{prefix}HEADER_"
    headers: dict[str, str] = {}
    for var, value in sorted(env_map.items()):
        if not (var.startswith(header_prefix) and value):
            continue
        name = "-".join(part.capitalize() for part in var[len(header_prefix) :].split("_"))
        headers[name] = value

    return ClientOptions(timeout=timeout, max_retries=max_retries, headers=headers)
