"""The current user, the vault's fleets and IP addresses, spaces and projects."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from cvedb.models import Fleet, IPAddress, Project, Space, User
from cvedb.transport import ApiError, BaseClient


@contextmanager
def _failing(prefix: str) -> Iterator[None]:
    try:
        yield
    except ApiError as exc:
        raise ApiError(f"{prefix}: {exc}", exc.status_code) from exc
    except LookupError as exc:
        raise type(exc)(f"{prefix}: {exc}") from exc


def _without_empty(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value}


class AccountsApi(BaseClient):
    """Operations on the user's account, vault, spaces and projects."""

    def get_current_user(self) -> User:
        """Return the user the token belongs to."""
        with _failing("failed to get user info"):
            data = self.request("GET", "/users/me/")
        return User.from_dict(data or {})

    def get_vault_ip_addresses(self) -> list[IPAddress]:
        """Return the vault's static IP addresses."""
        with _failing("failed to get IP addresses"):
            items = self.paginate(f"/ip/?vault={self.vault_id}")
        return [IPAddress.from_dict(item) for item in items]

    def get_fleets(self) -> list[Fleet]:
        """Return the vault's fleets."""
        with _failing("failed to get fleets"):
            items = self.paginate(f"/fleet/?vault={self.vault_id}")
        return [Fleet.from_dict(item) for item in items]

    def get_fleet(self, fleet_id: uuid.UUID) -> Fleet:
        """Return the fleet with the given ID."""
        with _failing("failed to get fleets"):
            fleets = self.get_fleets()
        for fleet in fleets:
            if fleet.id == fleet_id:
                return fleet
        raise LookupError(f'fleet "{fleet_id}" not found')

    def get_fleet_by_name(self, name: str) -> Fleet:
        """Return the fleet with exactly the given name."""
        with _failing("failed to get fleets"):
            fleets = self.get_fleets()
        if not fleets:
            raise LookupError("no fleets found")
        for fleet in fleets:
            if fleet.name == name:
                return fleet
        raise LookupError(f'fleet "{name}" not found')

    def get_space(self, space_id: uuid.UUID) -> Space:
        """Return a space with its projects and workflows."""
        with _failing("failed to get space"):
            data = self.request("GET", f"/spaces/{space_id}/")
        return Space.from_dict(data or {})

    def get_spaces(self, name: str = "") -> list[Space]:
        """Return the vault's spaces, filtered by name when one is given."""
        path = f"/spaces/?vault={self.vault_id}"
        if name:
            path += f"&name={name}"
        with _failing("failed to get spaces"):
            items = self.paginate(path)
        return [Space.from_dict(item) for item in items]

    def get_space_by_name(self, name: str) -> Space:
        """Return the space with exactly the given name, fully loaded."""
        spaces = self.get_spaces(name)
        for space in spaces:
            if space.name == name:
                with _failing("failed to get space"):
                    return self.get_space(space.id)
        raise LookupError(f'space "{name}" not found')

    def create_space(self, name: str, description: str = "") -> Space:
        """Create a space in the vault."""
        body = _without_empty(
            {
                "name": name,
                "description": description,
                "vault_info": str(self.vault_id) if self.vault_id is not None else None,
            }
        )
        with _failing("failed to create space"):
            data = self.request("POST", "/spaces/", body)
        return Space.from_dict(data or {})

    def delete_space(self, space_id: uuid.UUID) -> None:
        """Delete a space."""
        with _failing("failed to delete space"):
            self.request("DELETE", f"/spaces/{space_id}/")

    def create_project(self, name: str, description: str, space_id: uuid.UUID) -> Project:
        """Create a project in a space."""
        body = _without_empty(
            {"name": name, "description": description, "space_info": str(space_id)}
        )
        with _failing("failed to create project"):
            data = self.request("POST", f"/projects/?vault={self.vault_id}", body)
        return Project.from_dict(data or {})

    def delete_project(self, project_id: uuid.UUID) -> None:
        """Delete a project."""
        with _failing("failed to delete project"):
            self.request("DELETE", f"/projects/{project_id}/")