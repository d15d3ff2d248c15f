"""Client identities used to rotate outgoing requests."""

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(frozen=True)
class ClientIdentity:
    """A header set and, optionally, the upstream proxy it is sent through."""

    name: str
    headers: dict[str, str] = field(default_factory=dict, compare=False, hash=False)
    proxy_url: Optional[str] = field(default=None, compare=False, hash=False)


def build_identities(
    user_agents: Sequence[str],
    proxy_urls: Sequence[str] = (),
    origin: Optional[str] = None,
) -> list[ClientIdentity]:
    """
    Build one identity per user agent (or per proxy, whichever is more).

    User agents and proxies are paired round-robin. With no proxies the
    identities differ only by headers.
    """
    if not user_agents:
        raise ValueError("at least one user agent is required")

    count = max(len(user_agents), len(proxy_urls))
    identities = []
    for index in range(count):
        headers = {
            "User-Agent": user_agents[index % len(user_agents)],
            "Accept": "application/json",
        }
        if origin:
            headers["Origin"] = origin.rstrip("/")
            headers["Referer"] = origin.rstrip("/") + "/"
        proxy_url = proxy_urls[index % len(proxy_urls)] if proxy_urls else None
        identities.append(
            ClientIdentity(name=f"identity-{index}", headers=headers, proxy_url=proxy_url)
        )
    return identities
