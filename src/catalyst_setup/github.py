"""GitHub REST calls used when the ``gh`` CLI is not available."""

import logging
import ssl

import httpx
import truststore

log = logging.getLogger(__name__)

API_URL = "https://api.github.com"

ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)


class GitHubError(RuntimeError):
    pass


def _github_auth_headers(token: str | None) -> dict:
    """Return Authorization header dict only when a non-empty token exists."""
    return {"Authorization": f"Bearer {token}"} if token else {}


def make_client(verify_tls: bool = True) -> httpx.Client:
    return httpx.Client(verify=ssl_context if verify_tls else False)


def create_private_repo(name: str, token: str, *, client: httpx.Client | None = None, description: str = "") -> str:
    """Create a private repository for the token's user and return its SSH URL."""
    if client is None:
        client = make_client()

    headers = {
        "Accept": "application/vnd.github+json",
        **_github_auth_headers(token),
    }
    payload = {"name": name, "private": True, "description": description}
    log.debug("POST %s/user/repos name=%s", API_URL, name)
    try:
        response = client.post(f"{API_URL}/user/repos", json=payload, headers=headers, timeout=30)
    except httpx.HTTPError as e:
        raise GitHubError(f"GitHub API request failed: {e}") from e

    if response.status_code != 201:
        raise GitHubError(f"GitHub API returned {response.status_code}: {response.text[:400]}")
    try:
        data = response.json()
    except ValueError as je:
        raise GitHubError(f"Failed to parse GitHub response: {je}") from je
    url = data.get("ssh_url") or data.get("clone_url")
    if not url:
        raise GitHubError("GitHub response did not include a clone URL")
    return url
