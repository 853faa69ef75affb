"""Credentials for third-party integrations, stored in the secrets config."""

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .jsonstore import dig, read_json_lenient, write_json_atomic
from .settings import PLACEHOLDER_TOKEN, Settings
from .state import WorkspaceState
from .ui import console, print_header, print_info, print_success, print_warning

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Field:
    key: str
    prompt: str
    help: tuple[str, ...] = ()


@dataclass(frozen=True)
class Integration:
    key: str
    name: str
    purpose: str
    credential: str
    title: str
    docs_url: str
    steps: tuple[str, ...]
    fields: tuple[Field, ...]
    # optional hook that may supply a field value without prompting
    derive: Callable[[str, "PromptContext"], str | None] | None = None


@dataclass
class PromptContext:
    project_config: dict | None = None


def _linear_team_key(field_key: str, context: PromptContext) -> str | None:
    if field_key != "teamKey":
        return None
    return dig(context.project_config, "catalyst", "project", "ticketPrefix")


INTEGRATIONS = (
    Integration(
        key="linear",
        name="Linear",
        purpose="Project Management",
        credential="apiToken",
        title="Linear API Token Setup",
        docs_url="https://linear.app/docs/api-and-webhooks#api-keys",
        steps=(
            "Go to https://linear.app/settings/api",
            "Click 'Create key' under Personal API Keys",
            "Give it a name (e.g., 'Catalyst')",
            "Copy the token (starts with 'lin_api_')",
        ),
        fields=(
            Field("apiToken", "Linear API token"),
            Field(
                "teamKey",
                "Linear team key (identifier)",
                (
                    "This is the short prefix used in your Linear issue IDs.",
                    "Find it in: Linear → Team Settings → 'Identifier' field",
                    "Example: If your issues look like 'CTL-123', enter 'CTL'",
                ),
            ),
            Field(
                "defaultTeam",
                "Linear team name",
                (
                    "This is the full team name (not the identifier).",
                    "Find it in: Linear → Team Settings → 'Icon & Name' section",
                ),
            ),
        ),
        derive=_linear_team_key,
    ),
    Integration(
        key="sentry",
        name="Sentry",
        purpose="Error Monitoring",
        credential="authToken",
        title="Sentry Auth Token Setup",
        docs_url="https://docs.sentry.io/api/guides/create-auth-token/",
        steps=(
            "Go to https://sentry.io/settings/account/api/auth-tokens/",
            "Click 'Create New Token'",
            "Add scopes: project:read, event:read, org:read",
            "Copy the generated token",
        ),
        fields=(
            Field("org", "Sentry organization slug"),
            Field("project", "Sentry project slug"),
            Field("authToken", "Sentry auth token"),
        ),
    ),
    Integration(
        key="railway",
        name="Railway",
        purpose="Deployment",
        credential="token",
        title="Railway API Token Setup",
        docs_url="https://docs.railway.com/guides/public-api",
        steps=(
            "Click your profile icon → Account Settings → Tokens",
            "Click 'Create Token'",
            "Give it a name (e.g., 'Catalyst')",
            "Copy the generated token",
        ),
        fields=(
            Field("token", "Railway token"),
            Field("projectId", "Railway project ID"),
        ),
    ),
    Integration(
        key="posthog",
        name="PostHog",
        purpose="Analytics",
        credential="apiKey",
        title="PostHog Personal API Key Setup",
        docs_url="https://posthog.com/docs/api",
        steps=(
            "Click your avatar (bottom left) → gear icon → Account settings",
            "Go to 'Personal API Keys' tab",
            "Click 'Create personal API key'",
            "Add a name and select required scopes",
            "Copy the key (shown only once!)",
        ),
        fields=(
            Field("apiKey", "PostHog API key"),
            Field("projectId", "PostHog project ID"),
        ),
    ),
    Integration(
        key="exa",
        name="Exa",
        purpose="Search API",
        credential="apiKey",
        title="Exa API Key Setup",
        docs_url="https://docs.exa.ai/websets/api/get-started",
        steps=(
            "Create account at https://exa.ai/ (free tier available)",
            "Go to https://dashboard.exa.ai/api-keys",
            "Click '+ CREATE NEW KEY'",
            "Name it (e.g., 'Catalyst') and copy the key",
            "Store it securely (shown only once!)",
        ),
        fields=(Field("apiKey", "Exa API key"),),
    ),
)


def is_configured(doc: dict, integration: Integration) -> bool:
    token = dig(doc, "catalyst", integration.key, integration.credential)
    return bool(token) and token != PLACEHOLDER_TOKEN


def _show_instructions(integration: Integration):
    print_info()
    print_info(f"[bold]{integration.title}:[/bold]")
    print_info(f"  📚 Documentation: {integration.docs_url}")
    print_info()
    print_info("  Steps:")
    for i, step in enumerate(integration.steps, start=1):
        print_info(f"  {i}. {step}")
    print_info()


def configure_integration(doc: dict, integration: Integration, prompter, context: PromptContext) -> dict:
    """Return *doc* with the integration's sub-object set, or *doc* unchanged if skipped."""
    console.rule(f"{integration.name} Configuration ({integration.purpose})", style="bright_black")

    if is_configured(doc, integration):
        print_success(f"{integration.name} already configured")
        if not prompter.confirm(f"Update {integration.name} config?"):
            return doc

    if not prompter.confirm(f"Configure {integration.name} integration?"):
        print_info(f"Skipping {integration.name}. You can add it later by re-running setup.")
        return doc

    _show_instructions(integration)

    values = {}
    for fld in integration.fields:
        derived = integration.derive(fld.key, context) if integration.derive else None
        if derived:
            print_info(f"{fld.prompt}: using '{derived}' from project config")
            values[fld.key] = derived
            continue
        for line in fld.help:
            print_info(f"  {line}")
        values[fld.key] = prompter.ask(fld.prompt)

    updated = copy.deepcopy(doc)
    if not isinstance(updated.get("catalyst"), dict):
        updated["catalyst"] = {}
    updated["catalyst"][integration.key] = values
    return updated


def configure_all(doc: dict, prompter, context: PromptContext, integrations=INTEGRATIONS) -> dict:
    for integration in integrations:
        doc = configure_integration(doc, integration, prompter, context)
    return doc


def setup_secrets(state: WorkspaceState, prompter, settings: Settings) -> tuple[WorkspaceState, Path | None]:
    """Prompt for every integration and write the secrets config once.

    Returns the config path, or None when the operator kept the existing file.
    """
    print_header("Setting Up Catalyst Secrets")

    config_file = settings.secrets_config_path(state.project_key)
    print_info("This config file stores API tokens and secrets.")
    print_info(f"Location: {config_file}")
    print_info()
    print_info("You can configure integrations now or skip and add them later.")
    print_info()

    on_disk = None
    if config_file.exists():
        print_warning("Found existing secrets config")
        if not prompter.confirm("Update/add integrations?"):
            print_success("Keeping existing secrets config")
            return state, None
        on_disk = read_json_lenient(config_file)

    context = PromptContext(
        project_config=read_json_lenient(settings.project_config_path(state.project_dir)),
    )
    final = configure_all(on_disk or {"catalyst": {}}, prompter, context)
    if on_disk is not None and final == on_disk:
        print_success("Secrets config unchanged")
        return state, config_file

    write_json_atomic(config_file, final)
    section = final.get("catalyst")
    configured = sorted(k for k, v in section.items() if isinstance(v, dict)) if isinstance(section, dict) else []
    log.debug("Secrets config integrations: %s", configured)
    print_success(f"Secrets config saved: {config_file}")
    if not configured:
        state = state.warn("No integrations configured")
    return state, config_file
