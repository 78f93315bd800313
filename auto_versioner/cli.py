"""CLI entry point for auto-versioner."""

from __future__ import annotations

from dataclasses import dataclass
from importlib.metadata import version as pkg_version
from pathlib import Path

import click
from loguru import logger

from .branchmap import DEFAULT_MAPPING, BranchMapping, BranchResolver
from .bump import parse_bump
from .config import Resolver, load_project_settings
from .errors import AutoVersionerError, ConfigError
from .inferbump import InferBumpService
from .labels import DEFAULT_LABEL_PREFIX, Decision, LabelResolver
from .logging_config import LEVEL_TERSE, setup_logging
from .models import Mode
from .planner import Planner
from .prlabel import PRLabelService
from .pulls import GitHubPullRequests
from .shell import step
from .tagging import CreateTagConfig, TaggingService
from .tagstore import GitTagStore

__version__ = pkg_version("auto-versioner")

DEFAULT_TAGGER_NAME = "auto-versioner"
DEFAULT_TAGGER_EMAIL = "auto-versioner@users.noreply.github.com"


@dataclass
class Runtime:
    """Per-invocation state shared by the subcommands."""

    resolver: Resolver
    branches: BranchResolver
    labels: LabelResolver


def _required(value: str, name: str, env_key: str) -> str:
    if not value:
        raise click.UsageError(f"{name} is required (set {env_key} or --{name})")
    return value


def _tuple_or_none(values: tuple[str, ...]) -> list[str] | None:
    return list(values) if values else None


@click.group()
@click.version_option(package_name="auto-versioner")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default="pyproject.toml",
    show_default=True,
    help="pyproject.toml holding a [tool.auto-versioner] table.",
)
@click.option("--log-level", default=None, help="Log verbosity: terse or verbose (env: AV_LOG_LEVEL).")
@click.option("--label-prefix", default=None, help="Prefix for semver labels (env: AV_LABEL_PREFIX).")
@click.option("--label-major", default=None, help="Label name for major bumps (env: AV_LABEL_MAJOR).")
@click.option("--label-minor", default=None, help="Label name for minor bumps (env: AV_LABEL_MINOR).")
@click.option("--label-patch", default=None, help="Label name for patch bumps (env: AV_LABEL_PATCH).")
@click.option(
    "--branch-major-prefix",
    multiple=True,
    help="Branch prefix implying a major bump; repeatable (env: AV_BRANCH_MAJOR_PREFIXES).",
)
@click.option(
    "--branch-minor-prefix",
    multiple=True,
    help="Branch prefix implying a minor bump; repeatable (env: AV_BRANCH_MINOR_PREFIXES).",
)
@click.option(
    "--branch-patch-prefix",
    multiple=True,
    help="Branch prefix implying a patch bump; repeatable (env: AV_BRANCH_PATCH_PREFIXES).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path,
    log_level: str | None,
    label_prefix: str | None,
    label_major: str | None,
    label_minor: str | None,
    label_patch: str | None,
    branch_major_prefix: tuple[str, ...],
    branch_minor_prefix: tuple[str, ...],
    branch_patch_prefix: tuple[str, ...],
) -> None:
    """Semantic version tagging from branch names and pull request labels."""
    try:
        resolver = Resolver(load_project_settings(config_path))
        setup_logging(resolver.string("log-level", "AV_LOG_LEVEL", log_level, LEVEL_TERSE))
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    labels = LabelResolver(
        prefix=resolver.string("label-prefix", "AV_LABEL_PREFIX", label_prefix, DEFAULT_LABEL_PREFIX),
        major_label=resolver.string("label-major", "AV_LABEL_MAJOR", label_major),
        minor_label=resolver.string("label-minor", "AV_LABEL_MINOR", label_minor),
        patch_label=resolver.string("label-patch", "AV_LABEL_PATCH", label_patch),
    )
    branches = BranchResolver(
        BranchMapping(
            major_prefixes=resolver.string_list(
                "branch-major-prefixes", "AV_BRANCH_MAJOR_PREFIXES",
                _tuple_or_none(branch_major_prefix), DEFAULT_MAPPING.major_prefixes,
            ),
            minor_prefixes=resolver.string_list(
                "branch-minor-prefixes", "AV_BRANCH_MINOR_PREFIXES",
                _tuple_or_none(branch_minor_prefix), DEFAULT_MAPPING.minor_prefixes,
            ),
            patch_prefixes=resolver.string_list(
                "branch-patch-prefixes", "AV_BRANCH_PATCH_PREFIXES",
                _tuple_or_none(branch_patch_prefix), DEFAULT_MAPPING.patch_prefixes,
            ),
        )
    )
    ctx.obj = Runtime(resolver=resolver, branches=branches, labels=labels)


@cli.command("create-tag")
@click.option("--tag-mode", default=None, help="release or rc (env: AV_TAG_MODE).")
@click.option("--bump", "bump_value", default=None, help="major, minor or patch (env: AV_BUMP).")
@click.option("--base-version", default=None, help="Base version when no release exists (env: AV_BASE_VERSION).")
@click.option("--commit-sha", default=None, help="Commit the tag points at (env: AV_COMMIT_SHA).")
@click.option("--tag-message", default=None, help="Annotated tag message (env: AV_TAG_MESSAGE).")
@click.option("--tagger-name", default=None, help="Tagger name (env: AV_TAGGER_NAME).")
@click.option("--tagger-email", default=None, help="Tagger email (env: AV_TAGGER_EMAIL).")
@click.option("--tag-prefix", default=None, help="Prefix for tag names, e.g. 'v' (env: AV_TAG_PREFIX).")
@click.option(
    "--use-floating-tags/--no-use-floating-tags",
    default=None,
    help="Maintain floating v<major> tags (env: AV_USE_FLOATING_TAGS).",
)
@click.option("--remote", default=None, help="Git remote holding the tags (env: AV_REMOTE).")
@click.option("--dry-run/--no-dry-run", default=None, help="Plan only; do not touch the remote (env: AV_DRY_RUN).")
@click.pass_obj
def create_tag(
    runtime: Runtime,
    tag_mode: str | None,
    bump_value: str | None,
    base_version: str | None,
    commit_sha: str | None,
    tag_message: str | None,
    tagger_name: str | None,
    tagger_email: str | None,
    tag_prefix: str | None,
    use_floating_tags: bool | None,
    remote: str | None,
    dry_run: bool | None,
) -> None:
    """Plan the next release or RC tag and create it on the remote."""
    r = runtime.resolver
    try:
        mode_value = _required(r.string("tag-mode", "AV_TAG_MODE", tag_mode).lower(), "tag-mode", "AV_TAG_MODE")
        try:
            mode = Mode(mode_value)
        except ValueError:
            raise click.UsageError(f"invalid tag mode {mode_value!r}") from None
        try:
            bump = parse_bump(_required(r.string("bump", "AV_BUMP", bump_value), "bump", "AV_BUMP"))
        except ValueError as exc:
            raise click.UsageError(str(exc)) from exc

        config = CreateTagConfig(
            mode=mode,
            bump=bump,
            base_version=r.string("base-version", "AV_BASE_VERSION", base_version),
            use_floating_tags=r.boolean("use-floating-tags", "AV_USE_FLOATING_TAGS", use_floating_tags),
            commit_sha=_required(r.string("commit-sha", "AV_COMMIT_SHA", commit_sha), "commit-sha", "AV_COMMIT_SHA"),
            message=r.string("tag-message", "AV_TAG_MESSAGE", tag_message),
            tagger_name=_required(
                r.string("tagger-name", "AV_TAGGER_NAME", tagger_name, DEFAULT_TAGGER_NAME),
                "tagger-name", "AV_TAGGER_NAME",
            ),
            tagger_email=_required(
                r.string("tagger-email", "AV_TAGGER_EMAIL", tagger_email, DEFAULT_TAGGER_EMAIL),
                "tagger-email", "AV_TAGGER_EMAIL",
            ),
            dry_run=r.boolean("dry-run", "AV_DRY_RUN", dry_run),
        )
        prefix = r.string("tag-prefix", "AV_TAG_PREFIX", tag_prefix)
        store = GitTagStore(r.string("remote", "AV_REMOTE", remote, "origin"))

        step(f"Planning {config.mode} tag ({config.bump} bump)")
        result = TaggingService(store, Planner(prefix)).plan_and_create(config)
    except AutoVersionerError as exc:
        raise click.ClickException(str(exc)) from exc

    log = logger.bind(
        mode=str(result.mode),
        tag=result.tag_name,
        releaseBase=str(result.release_base),
        baseSource=str(result.base_source),
        targetRelease=str(result.target_release),
        commit=config.commit_sha,
        tagger=config.tagger_name,
    )
    if result.mode is Mode.RC:
        log = log.bind(rcNumber=result.rc_number)
    if prefix:
        log = log.bind(tagPrefix=prefix)
    log.info("annotated tag planned" if config.dry_run else "annotated tag created")

    floating = result.floating
    if result.mode is Mode.RELEASE and floating is not None:
        if floating.enabled:
            floating_log = logger.bind(floatingTag=floating.tag_name)
            if floating.deleted_existing:
                floating_log = floating_log.bind(replaced=True)
            if floating.auto_detected and not config.use_floating_tags:
                floating_log = floating_log.bind(autoEnabled=True, detectedMajor=floating.auto_detected_major)
            floating_log.info("floating tag planned" if config.dry_run else "floating tag updated")
        elif floating.auto_detected:
            logger.bind(floatingMajor=floating.auto_detected_major).info("floating tag usage detected")
    elif config.use_floating_tags:
        logger.bind(reason="floating tags only apply to release mode").warning(
            "floating tag requested but not applied"
        )

    click.echo(result.tag_name)


@cli.command("infer-bump")
@click.option("--commit-sha", default=None, help="Merge commit to inspect (env: AV_COMMIT_SHA).")
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Fail when the commit has no pull request (env: AV_STRICT).",
)
@click.pass_obj
def infer_bump(runtime: Runtime, commit_sha: str | None, strict: bool | None) -> None:
    """Infer the bump intent from the merge commit's pull request labels."""
    r = runtime.resolver
    try:
        commit = _required(r.string("commit-sha", "AV_COMMIT_SHA", commit_sha), "commit-sha", "AV_COMMIT_SHA")
        strict_value = r.boolean("strict", "AV_STRICT", strict)
        result = InferBumpService(GitHubPullRequests(), runtime.labels).resolve(commit, strict=strict_value)
    except AutoVersionerError as exc:
        raise click.ClickException(str(exc)) from exc

    log = logger.bind(commit=result.commit_sha)
    if result.pr_number:
        log = log.bind(pr=result.pr_number)
    if result.defaulted:
        log.bind(bump=str(result.bump), reason=result.default_reason.value).warning("default bump applied")
    else:
        log.bind(bump=str(result.bump)).info("bump inferred")
    if result.semver_labels:
        log.bind(labels=list(result.semver_labels)).debug("semver labels considered")

    click.echo(str(result.bump))


@cli.command("pr-label")
@click.option("--pr-id", type=int, default=None, help="Pull request number (env: AV_PR_ID).")
@click.option("--source-branch", default=None, help="Pull request source branch (env: AV_SOURCE_BRANCH).")
@click.pass_obj
def pr_label(runtime: Runtime, pr_id: int | None, source_branch: str | None) -> None:
    """Ensure the expected semver label exists on a pull request."""
    r = runtime.resolver
    try:
        number = r.integer("pr-id", "AV_PR_ID", pr_id)
        if number <= 0:
            raise click.UsageError("pr-id must be greater than zero")
        branch = _required(
            r.string("source-branch", "AV_SOURCE_BRANCH", source_branch), "source-branch", "AV_SOURCE_BRANCH"
        )
        service = PRLabelService(GitHubPullRequests(), runtime.branches, runtime.labels)
        result = service.apply(number, branch)
    except AutoVersionerError as exc:
        raise click.ClickException(str(exc)) from exc

    log = logger.bind(
        pr=number,
        branch=branch,
        bump=str(result.bump),
        branchMatched=result.branch_matched,
        matchedPrefix=result.matched_prefix,
    )
    if result.decision is Decision.ADD_EXPECTED:
        log.bind(label=result.expected_label).info("adding semver label")
    elif result.decision is Decision.CONFLICT:
        log.bind(expected=result.expected_label, existing=list(result.existing_semver)).warning(
            "conflicting semver labels detected"
        )
    else:
        log.bind(label=result.expected_label).info("expected semver label already present")
    if result.label_added:
        log.bind(label=result.expected_label).info("semver label added")


@cli.command("version")
def version() -> None:
    """Print the installed auto-versioner version."""
    click.echo(f"auto-versioner {__version__}")
