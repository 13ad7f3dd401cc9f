"""
Onboarding wizard — threads one document through every stage.

    snapshot → quickstart defaults → answers → auth → gateway → channel
    → write → workspace → hooks → metadata → write

Each stage takes the current document and returns a new one. The document is
written twice, both times in full: once after the auth/gateway/channel merges
and once after hooks and the metadata stamp. An interrupted prompt aborts the
run before the first write.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from clawgate.config_file import (
    Document,
    get_section,
    merge_documents,
    read_config_snapshot,
    write_config_file,
)
from clawgate.errors import ConfigValidationError
from clawgate.runtime import RuntimeEnv
from clawgate.wizard.auth_choice import AuthChoice, apply_auth_choice
from clawgate.wizard.channels import ChannelPatch, enable_channel
from clawgate.wizard.defaults import resolve_quickstart_defaults
from clawgate.wizard.gateway_config import configure_gateway_for_onboarding
from clawgate.wizard.hooks import setup_internal_hooks
from clawgate.wizard.metadata import apply_wizard_metadata
from clawgate.wizard.prompts import WizardPrompter, required
from clawgate.wizard.summary import (
    format_issues,
    quickstart_lines,
    settings_lines,
    summarize_existing_config,
)
from clawgate.wizard.types import BindMode, GatewayOverride, GatewaySettings, WizardFlow
from clawgate.workspace import ensure_workspace_and_sessions, resolve_user_path

logger = structlog.get_logger(__name__)

REPAIR_COMMAND = "clawgate doctor"
ONBOARD_COMMAND = "onboard"
GATEWAY_MODE = "local"


@dataclass(frozen=True)
class OnboardOptions:
    """Answers supplied up front (CLI flags); anything left ``None`` may be prompted."""

    flow: WizardFlow = WizardFlow.QUICKSTART
    workspace: Optional[str] = None
    api_key: Optional[str] = None
    skip_auth: bool = False
    provider: Optional[str] = None
    base_url: Optional[str] = None
    telegram_user_id: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    gateway: GatewayOverride = field(default_factory=GatewayOverride)

    def __repr__(self) -> str:
        return (
            f"OnboardOptions(flow={self.flow.value}, workspace={self.workspace!r}, "
            f"skip_auth={self.skip_auth}, provider={self.provider!r})"
        )


@dataclass(frozen=True)
class SetupAnswers:
    auth: AuthChoice
    telegram_user_id: str
    telegram_bot_token: Optional[str] = None


@dataclass(frozen=True)
class OnboardingResult:
    config_path: Path
    config: Document
    settings: GatewaySettings
    workspace_dir: Path


async def collect_setup_answers(
    opts: OnboardOptions,
    runtime: RuntimeEnv,
    base_config: Document,
    prompter: WizardPrompter,
) -> SetupAnswers:
    settings = runtime.settings
    provider = (opts.provider or settings.provider).strip().lower()
    base_url = opts.base_url or settings.provider_base_url

    stored_key = get_section(base_config, "models", "providers", provider).get("apiKey")
    api_key = opts.api_key or settings.provider_api_key
    if opts.skip_auth:
        auth = AuthChoice.skip(provider, base_url=base_url)
    elif api_key:
        auth = AuthChoice.with_api_key(api_key, provider=provider, base_url=base_url)
    elif stored_key:
        auth = AuthChoice.skip(provider, base_url=base_url)
    else:
        entered = await prompter.text(
            f"{provider} API key",
            placeholder="sk-...",
            validate=required,
            secret=True,
        )
        auth = AuthChoice.with_api_key(entered, provider=provider, base_url=base_url)

    user_id = (opts.telegram_user_id or "").strip()
    if not user_id:
        user_id = (
            await prompter.text(
                "Telegram user ID (for allowlist)",
                placeholder="123456789",
                validate=required,
            )
        ).strip()

    bot_token: Optional[str] = None
    if not get_section(base_config, "channels", "telegram").get("botToken"):
        bot_token = opts.telegram_bot_token or settings.telegram_bot_token
        if not bot_token:
            bot_token = (
                await prompter.text(
                    "Telegram bot token (from @BotFather)",
                    placeholder="123456789:ABC...",
                    validate=required,
                    secret=True,
                )
            ).strip()

    return SetupAnswers(auth=auth, telegram_user_id=user_id, telegram_bot_token=bot_token)


async def _resolve_workspace(
    opts: OnboardOptions,
    runtime: RuntimeEnv,
    base_config: Document,
    prompter: WizardPrompter,
) -> Path:
    existing = get_section(base_config, "agents", "defaults").get("workspace")
    fallback = str(runtime.settings.workspace or existing or runtime.settings.default_workspace)
    if opts.workspace is not None:
        raw = opts.workspace
    elif opts.flow is WizardFlow.QUICKSTART:
        raw = fallback
    else:
        raw = await prompter.text("Workspace directory", initial_value=fallback)
    return resolve_user_path(raw.strip() or str(runtime.settings.default_workspace))


async def finalize_onboarding(
    *,
    prompter: WizardPrompter,
    result: OnboardingResult,
) -> None:
    lines = settings_lines(result.settings)
    lines.append(f"Workspace: {result.workspace_dir}")
    lines.append(f"Config: {result.config_path}")
    if result.settings.bind is BindMode.LOOPBACK:
        lines.append(f"Dashboard: http://127.0.0.1:{result.settings.port}/")
    await prompter.note("\n".join(lines), "Gateway")
    await prompter.outro("Onboarding complete. Restart the gateway to pick up the new config.")


async def run_onboarding_wizard(
    opts: OnboardOptions,
    runtime: RuntimeEnv,
    prompter: WizardPrompter,
) -> OnboardingResult:
    config_path = runtime.settings.config_path
    await prompter.intro("clawgate onboarding")

    snapshot = read_config_snapshot(config_path)
    if snapshot.exists and not snapshot.valid:
        logger.error(
            "onboarding.snapshot_invalid",
            path=str(config_path),
            issue_count=len(snapshot.issues),
        )
        await prompter.note(summarize_existing_config(snapshot.config), "Invalid config")
        if snapshot.issues:
            await prompter.note(format_issues(snapshot.issues), "Config issues")
        await prompter.outro(
            f"Config invalid. Run `{REPAIR_COMMAND}` to repair it, then re-run onboarding."
        )
        raise ConfigValidationError(config_path, snapshot.issues)
    base_config = snapshot.config

    await prompter.note(
        "Please fill in the following to complete setup.\n"
        "Everything else will be configured automatically.",
        "Setup",
    )
    answers = await collect_setup_answers(opts, runtime, base_config, prompter)

    defaults = resolve_quickstart_defaults(base_config, port_override=runtime.settings.gateway_port)
    if opts.flow is WizardFlow.QUICKSTART:
        await prompter.note("\n".join(quickstart_lines(defaults)), "QuickStart")

    workspace_dir = await _resolve_workspace(opts, runtime, base_config, prompter)
    next_config = merge_documents(
        base_config,
        {
            "agents": {"defaults": {"workspace": str(workspace_dir)}},
            "gateway": {"mode": GATEWAY_MODE},
        },
    )

    next_config = apply_auth_choice(next_config, answers.auth, set_default_model=True)

    gateway = await configure_gateway_for_onboarding(
        base_config=base_config,
        next_config=next_config,
        defaults=defaults,
        prompter=prompter,
        override=opts.gateway,
        token_factory=runtime.token_factory,
    )
    next_config = gateway.next_config

    next_config = enable_channel(
        next_config,
        ChannelPatch(
            name="telegram",
            allow_from=answers.telegram_user_id,
            bot_token=answers.telegram_bot_token,
        ),
    )

    write_config_file(config_path, next_config)
    runtime.log_config_updated()

    skip_bootstrap = get_section(next_config, "agents", "defaults").get("skipBootstrap") is True
    ensure_workspace_and_sessions(
        workspace_dir,
        runtime.settings.sessions_dir,
        skip_bootstrap=skip_bootstrap,
    )

    next_config = await setup_internal_hooks(next_config, prompter)
    next_config = apply_wizard_metadata(
        next_config,
        command=ONBOARD_COMMAND,
        mode=GATEWAY_MODE,
        now=runtime.clock(),
    )
    write_config_file(config_path, next_config)
    logger.info("onboarding.completed", path=str(config_path), flow=opts.flow.value)

    result = OnboardingResult(
        config_path=config_path,
        config=next_config,
        settings=gateway.settings,
        workspace_dir=workspace_dir,
    )
    await finalize_onboarding(prompter=prompter, result=result)
    return result
