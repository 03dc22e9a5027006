"""Access grant storage and persistence."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from oauth_handshake.models.auth import AccessGrant


def _get_token_path(provider_id: str) -> Path:
    """Get default token storage path."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg_data) if xdg_data else Path.home() / ".local" / "share"
    return base / "oauth-handshake" / f"{provider_id}-token.json"


@dataclass
class CredentialStore:
    """Persistent storage for an access grant.

    Stores the grant in a JSON file readable only by its owner.
    """

    path: Path

    def __init__(self, path: Path | None = None, *, provider_id: str = "default") -> None:
        self.path = path or _get_token_path(provider_id)

    def save(self, grant: AccessGrant) -> None:
        """Save access grant to storage."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with self.path.open("w") as f:
            json.dump(grant.model_dump(), f, indent=2)

        # Set restrictive permissions (owner read/write only)
        self.path.chmod(0o600)

    def load(self) -> AccessGrant | None:
        """Load access grant from storage.

        Returns None if nothing is stored or the file is unreadable.
        """
        if not self.path.exists():
            return None

        try:
            with self.path.open() as f:
                data = json.load(f)
            return AccessGrant(value=data["value"], secret=data.get("secret"))
        except (json.JSONDecodeError, KeyError):
            return None

    def clear(self) -> None:
        """Remove stored grant."""
        if self.path.exists():
            self.path.unlink()

    def has_token(self) -> bool:
        """Check if a grant is stored."""
        return self.path.exists()
