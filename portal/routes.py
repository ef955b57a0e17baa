"""Route guard: gates portal navigation by session and role.

A guard evaluates to one of four states. Nothing redirects before the
session is hydrated, so a reload never flashes the login page.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from auth.types import Role
from portal.state import SessionSnapshot

LOGIN_ROUTE = "/login"
REGISTER_ROUTE = "/register"

LANDING_ROUTES: dict[Role, str] = {
    Role.ADMIN: "/admin/dashboard",
    Role.OWNER: "/owner/dashboard",
    Role.TENANT: "/tenant/dashboard",
}


def landing_route_for(role: Role | str) -> str:
    """The page a role lands on after sign-in or when denied elsewhere."""
    try:
        return LANDING_ROUTES[Role(role)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown role: {role!r}")


class GuardState(Enum):
    UNKNOWN = "unknown"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_WRONG_ROLE = "authenticated_wrong_role"
    AUTHENTICATED_ALLOWED = "authenticated_allowed"


class GuardAction(Enum):
    PENDING = "pending"  # render a loading placeholder, decide later
    REDIRECT = "redirect"
    RENDER = "render"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    state: GuardState | None = None
    redirect_to: str | None = None
    # Originally requested path, kept for returning after sign-in
    from_path: str | None = None


def protect(
    snapshot: SessionSnapshot,
    path: str,
    allowed_roles: Iterable[Role] | None = None,
) -> GuardDecision:
    """Guard a page that requires a session (and optionally specific roles)."""
    if not snapshot.is_hydrated:
        return GuardDecision(GuardAction.PENDING, GuardState.UNKNOWN)

    if not snapshot.is_authenticated:
        return GuardDecision(
            GuardAction.REDIRECT,
            GuardState.UNAUTHENTICATED,
            redirect_to=LOGIN_ROUTE,
            from_path=path,
        )

    allowed = frozenset(allowed_roles or ())
    role = snapshot.user.role
    if allowed and role not in allowed:
        return GuardDecision(
            GuardAction.REDIRECT,
            GuardState.AUTHENTICATED_WRONG_ROLE,
            redirect_to=landing_route_for(role),
        )

    return GuardDecision(GuardAction.RENDER, GuardState.AUTHENTICATED_ALLOWED)


def redirect_if_authenticated(snapshot: SessionSnapshot) -> GuardDecision:
    """Guard a public-only page (login, register): signed-in users go home."""
    if not snapshot.is_hydrated:
        return GuardDecision(GuardAction.PENDING, GuardState.UNKNOWN)
    if snapshot.is_authenticated:
        return GuardDecision(
            GuardAction.REDIRECT,
            GuardState.AUTHENTICATED_ALLOWED,
            redirect_to=landing_route_for(snapshot.user.role),
        )
    return GuardDecision(GuardAction.RENDER, GuardState.UNAUTHENTICATED)


@dataclass(frozen=True)
class Section:
    """A role-restricted area such as /owner with its pages."""

    prefix: str
    role: Role
    pages: frozenset[str]


DEFAULT_SECTIONS = (
    Section("/admin", Role.ADMIN, frozenset({"dashboard", "users", "properties"})),
    Section(
        "/owner",
        Role.OWNER,
        frozenset({"dashboard", "properties", "tenants", "rent-ledger", "maintenance"}),
    ),
    Section("/tenant", Role.TENANT, frozenset({"dashboard", "lease", "payments", "maintenance"})),
)


class RouteTable:
    """The portal's pages and which guard wraps each."""

    def __init__(self, sections: Iterable[Section] = DEFAULT_SECTIONS):
        self._sections = {section.prefix: section for section in sections}

    def resolve(self, path: str, snapshot: SessionSnapshot) -> GuardDecision:
        """Decide what navigating to path should do for this session."""
        path = "/" + path.strip("/") if path.strip("/") else "/"

        if path == "/":
            return GuardDecision(GuardAction.REDIRECT, redirect_to=LOGIN_ROUTE)

        if path in (LOGIN_ROUTE, REGISTER_ROUTE):
            return redirect_if_authenticated(snapshot)

        prefix, _, page = path[1:].partition("/")
        section = self._sections.get(f"/{prefix}")
        if section is None or (page and page not in section.pages):
            return GuardDecision(GuardAction.NOT_FOUND)

        decision = protect(snapshot, path, allowed_roles=[section.role])
        if decision.action is GuardAction.RENDER and not page:
            return GuardDecision(
                GuardAction.REDIRECT,
                GuardState.AUTHENTICATED_ALLOWED,
                redirect_to=f"{section.prefix}/dashboard",
            )
        return decision
