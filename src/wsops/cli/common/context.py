"""Application context management for the CLI."""

from dataclasses import dataclass

from wsops.cli.common.exits import die
from wsops.core.adapters.workspace import WorkspaceAdapter
from wsops.core.auth import AuthError, WorkspaceSession, get_session
from wsops.core.remote import RemoteCaller, RetryPolicy


@dataclass
class WorkspaceAppContext:
    """Application context holding the workspace session and adapter."""

    profile: str | None
    session: WorkspaceSession
    adapter: WorkspaceAdapter


def build_workspace_context(profile: str | None) -> WorkspaceAppContext:
    """Build the application context with an authenticated workspace adapter.

    Args:
        profile: Optional Databricks profile name to use for authentication.

    Returns:
        WorkspaceAppContext: Context with configured session and adapter.
    """
    try:
        session = get_session(profile)
    except AuthError as exc:
        die(str(exc), code=1)
    adapter = WorkspaceAdapter(RemoteCaller(session, RetryPolicy.from_env()))
    return WorkspaceAppContext(profile=profile, session=session, adapter=adapter)
