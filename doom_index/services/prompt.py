"""Prompt composition — seed, prompt text and archive filename for one signal context."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from doom_index.engine.archive_keys import build_archive_filename, build_archive_id
from doom_index.engine.context import SignalContext
from doom_index.engine.dominance import build_weighted_prompt
from doom_index.engine.hashing import seed_for_minute
from doom_index.engine.prompt import build_prompt_text, estimate_token_count
from doom_index.models.errors import InternalError
from doom_index.models.result import Err, Ok, Result
from doom_index.prompts import get_prompt_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptComposition:
    seed: str
    prompt: str
    negative: str
    archive_id: str
    filename: str
    width: int
    height: int
    format: str


class PromptService:
    def __init__(
        self,
        template: str = "default",
        style: str = "narrative",
        width: int = 1024,
        height: int = 1024,
        image_format: str = "webp",
    ) -> None:
        self.template = get_prompt_template(template)
        self.style = style
        self.width = width
        self.height = height
        self.image_format = image_format

    def compose(self, ctx: SignalContext) -> Result[PromptComposition]:
        try:
            seed = seed_for_minute(ctx.minute_bucket, ctx.params_hash)
            if self.style == "weighted":
                prompt, negative = build_weighted_prompt(ctx.raw)
            else:
                prompt = build_prompt_text(
                    self.template,
                    ctx.rounded,
                    ctx.visual_params,
                    ctx.fingerprint,
                    seed,
                    ctx.minute_bucket,
                )
                negative = self.template.negative_prompt
            composition = PromptComposition(
                seed=seed,
                prompt=prompt,
                negative=negative,
                archive_id=build_archive_id(ctx.minute_bucket, ctx.fingerprint, seed),
                filename=build_archive_filename(ctx.minute_bucket, ctx.fingerprint, seed, self.image_format),
                width=self.width,
                height=self.height,
                format=self.image_format,
            )
        except (ValueError, TypeError, KeyError) as e:
            logger.exception("Prompt composition failed for %s", ctx.minute_bucket)
            return Err(InternalError("Prompt composition failed", cause=e))

        chars, words = estimate_token_count(composition.prompt)
        logger.info(
            "Prompt composed (%s/%s) seed=%s tokens~%d/%d",
            self.template.id,
            self.style,
            seed,
            chars,
            words,
        )
        return Ok(composition)
