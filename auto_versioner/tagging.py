"""Tagging service: plan the next tag from the remote and create it.

This is the orchestrating layer around the pure planner:
1. List the remote's tags
2. Plan the release or RC tag
3. Create the annotated tag at the requested commit
4. For releases, move the floating "v<major>" tag (delete, then create)

Step 4 is not atomic. If the delete succeeds and the create fails, the
major has no floating tag until the command is re-run.
"""

from __future__ import annotations

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .bump import DEFAULT_BUMP, Bump
from .errors import ServiceError, TagStoreError
from .models import Mode, PlanResult, TagSpec
from .planner import Planner
from .tagstore import TagStore


class TagConfig(BaseModel):
    """Inputs required to compute the next tag."""

    model_config = ConfigDict(frozen=True)

    mode: Mode
    bump: Bump = DEFAULT_BUMP
    base_version: str = ""
    use_floating_tags: bool = False


class CreateTagConfig(TagConfig):
    """TagConfig plus what is needed to create the annotated tag.

    Attributes:
        commit_sha: Commit the new tag points at.
        message: Annotated tag message; defaults to the tag name.
        tagger_name: Name recorded as the tagger.
        tagger_email: Email recorded as the tagger.
        dry_run: Plan only; never create or delete remote tags.
    """

    commit_sha: str
    message: str = ""
    tagger_name: str
    tagger_email: str
    dry_run: bool = False


class TaggingService:
    """Fetch tags from a TagStore and delegate to the Planner."""

    def __init__(self, store: TagStore, planner: Planner) -> None:
        self.store = store
        self.planner = planner

    def plan(self, config: TagConfig) -> PlanResult:
        """List remote tags and return the plan for the configured mode."""
        tags = self.store.list_tags()

        if config.mode is Mode.RELEASE:
            return self.planner.plan_release(
                tags,
                config.bump,
                config.base_version,
                use_floating_tags=config.use_floating_tags,
            )
        if config.mode is Mode.RC:
            return self.planner.plan_rc(tags, config.bump, config.base_version)
        raise ServiceError(f"invalid mode {config.mode!r}")

    def plan_and_create(self, config: CreateTagConfig) -> PlanResult:
        """Plan the next tag and create it as an annotated tag on the remote.

        Raises:
            ServiceError: If commit or tagger identity is blank.
            TagStoreError: If a remote operation fails.
        """
        commit = config.commit_sha.strip()
        if not commit:
            raise ServiceError("commit sha is empty")
        tagger_name = config.tagger_name.strip()
        if not tagger_name:
            raise ServiceError("tagger name is empty")
        tagger_email = config.tagger_email.strip()
        if not tagger_email:
            raise ServiceError("tagger email is empty")

        plan = self.plan(config)

        spec = TagSpec(
            name=plan.tag_name,
            commit=commit,
            message=config.message.strip(),
            tagger_name=tagger_name,
            tagger_email=tagger_email,
        )

        if config.dry_run:
            logger.bind(tag=plan.tag_name, commit=commit).info("dry run: tag not created")
            return plan

        try:
            self.store.create_annotated_tag(spec)
        except TagStoreError as exc:
            raise TagStoreError(f"creating annotated tag {spec.name}: {exc}") from exc

        if plan.mode is Mode.RELEASE:
            self.apply_floating_tag(plan, spec)
        return plan

    def apply_floating_tag(self, plan: PlanResult, release_spec: TagSpec) -> None:
        """Execute the floating tag plan: delete the old tag, then create the new one."""
        floating = plan.floating
        if floating is None or not floating.enabled:
            return

        spec = release_spec.model_copy(update={"name": floating.tag_name})

        if floating.deleted_existing and floating.existing is not None:
            existing = floating.existing
            try:
                self.store.delete_tag(existing.name, existing.object_id)
            except TagStoreError as exc:
                raise TagStoreError(f"deleting floating tag {existing.name}: {exc}") from exc

        try:
            self.store.create_annotated_tag(spec)
        except TagStoreError as exc:
            if floating.deleted_existing:
                raise TagStoreError(
                    f"creating floating tag {spec.name}: {exc} "
                    f"(the previous {spec.name} was already deleted; re-run to restore it)"
                ) from exc
            raise TagStoreError(f"creating floating tag {spec.name}: {exc}") from exc
